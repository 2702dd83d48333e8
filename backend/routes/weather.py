# backend/routes/weather.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from config import settings
from models.users import User
from utils.tokenJWT import get_optional_user
from utils.weather_client import (
    REGION_COORDINATES, WeatherClient, WeatherServiceError, get_weather_client, resolve_region
)

router = APIRouter(prefix="/api/weather", tags=["Weather"])


class WeatherReport(BaseModel):
    region: str
    prevision: str
    temperature: float
    humidite: float
    vent: float
    pluie: float
    soleil: str
    conseils: List[str]


@router.get("/", response_model=WeatherReport)
async def get_weather(
    region: Optional[str] = Query(None, description="Wilaya name, defaults to the caller's region"),
    current_user: Optional[User] = Depends(get_optional_user),
    client: WeatherClient = Depends(get_weather_client),
):
    if region:
        resolved = resolve_region(region)
        if resolved is None:
            raise HTTPException(status_code=404, detail=f"Unknown region: {region}")
    else:
        # Profile regions are free text; fall back when they cannot be placed
        resolved = resolve_region(current_user.region if current_user else None) or resolve_region(settings.DEFAULT_REGION)

    try:
        return await client.get_report(resolved)
    except WeatherServiceError:
        raise HTTPException(status_code=503, detail="Weather service unavailable")


@router.get("/regions/", response_model=List[str])
def list_regions():
    return list(REGION_COORDINATES.keys())
