# backend/utils/weather_client.py
import httpx
import logging
import unicodedata
from typing import Dict, List, Optional, Tuple

from config import settings

logger = logging.getLogger(__name__)

# Capital coordinates of each wilaya (latitude, longitude)
REGION_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Nouakchott": (18.0735, -15.9582),
    "Trarza": (16.5138, -15.8050),
    "Brakna": (17.0531, -13.9167),
    "Gorgol": (16.1500, -13.5000),
    "Guidimaka": (15.1590, -12.1843),
    "Assaba": (16.6200, -11.4040),
    "Hodh El Gharbi": (16.6620, -9.6150),
    "Hodh Ech Chargui": (16.6170, -7.2500),
    "Tagant": (18.5560, -11.4270),
    "Adrar": (20.5170, -13.0500),
    "Dakhlet Nouadhibou": (20.9420, -17.0380),
    "Inchiri": (19.7460, -14.3850),
    "Tiris Zemmour": (22.7350, -12.4710),
}

# Spellings seen in user profiles
REGION_ALIASES = {
    "tarza": "Trarza",
    "nouadhibou": "Dakhlet Nouadhibou",
    "hodh el chargui": "Hodh Ech Chargui",
}


class WeatherServiceError(Exception):
    pass


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip().lower()


def resolve_region(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    folded = _fold(name)
    if folded in REGION_ALIASES:
        return REGION_ALIASES[folded]
    for region in REGION_COORDINATES:
        if _fold(region) == folded:
            return region
    return None


def describe_weather_code(code: Optional[int]) -> str:
    # WMO weather interpretation codes
    if code is None:
        return "Inconnu"
    if code == 0:
        return "Ensoleillé"
    if code in (1, 2, 3):
        return "Nuageux"
    if code in (45, 48):
        return "Brumeux"
    if 51 <= code <= 67 or 80 <= code <= 82:
        return "Pluvieux"
    if 71 <= code <= 77 or code in (85, 86):
        return "Neigeux"
    if code >= 95:
        return "Orageux"
    return "Variable"


def build_advice(temperature: float, humidity: float, wind: float, rain: float) -> List[str]:
    advice = []
    if temperature >= 40:
        advice.append("Chaleur extrême : arroser tôt le matin ou en soirée et protéger les jeunes plants.")
    elif temperature >= 35:
        advice.append("Forte chaleur : augmenter la fréquence d'arrosage.")
    if wind >= 30:
        advice.append("Vent fort : éviter les traitements par pulvérisation.")
    if rain >= 10:
        advice.append("Fortes pluies attendues : vérifier le drainage des parcelles.")
    elif rain > 0:
        advice.append("Pluie légère : réduire l'irrigation.")
    if humidity >= 80:
        advice.append("Humidité élevée : surveiller l'apparition de maladies fongiques.")
    if not advice:
        advice.append("Conditions favorables aux travaux agricoles.")
    return advice


class WeatherClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.WEATHER_API_URL
        self.timeout = settings.WEATHER_TIMEOUT
        self.transport = transport

    async def fetch_raw(self, lat: float, lng: float) -> dict:
        params = {
            "latitude": lat,
            "longitude": lng,
            "current": "temperature_2m,relative_humidity_2m,wind_speed_10m,precipitation,weather_code",
            "daily": "sunshine_duration,precipitation_sum",
            "forecast_days": 1,
            "timezone": "auto",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
                return response.json()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"Weather API error: {e}")
                raise WeatherServiceError(str(e)) from e

    async def get_report(self, region: str) -> dict:
        lat, lng = REGION_COORDINATES[region]
        data = await self.fetch_raw(lat, lng)
        try:
            current = data["current"]
            daily = data.get("daily") or {}
            temperature = float(current["temperature_2m"])
            humidity = float(current["relative_humidity_2m"])
            wind = float(current["wind_speed_10m"])
            rain_list = daily.get("precipitation_sum") or [current.get("precipitation") or 0]
            rain = float(rain_list[0] or 0)
            sunshine_list = daily.get("sunshine_duration") or [0]
            sunshine_hours = round(float(sunshine_list[0] or 0) / 3600, 1)
            code = current.get("weather_code")
        except (KeyError, TypeError, ValueError, IndexError) as e:
            logger.error(f"Unexpected weather payload for {region}: {e}")
            raise WeatherServiceError("Malformed weather payload") from e

        return {
            "region": region,
            "prevision": describe_weather_code(code),
            "temperature": round(temperature, 1),
            "humidite": round(humidity),
            "vent": round(wind, 1),
            "pluie": round(rain, 1),
            "soleil": f"{sunshine_hours} h",
            "conseils": build_advice(temperature, humidity, wind, rain),
        }


weather_client = WeatherClient()

def get_weather_client() -> WeatherClient:
    return weather_client
