from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from schemas.sale import CamelModel


class DiagnosticOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    disease: str
    confidence: float
    description: Optional[str] = None
    treatment: List[str] = []
    image_url: Optional[str] = None
    parcel_id: Optional[int] = None
    created_at: Optional[datetime] = None


class DiseaseCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    treatment: List[str] = []


class DiseaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    treatment: Optional[List[str]] = None


# Figures shown on the admin ML page
class ModelStats(CamelModel):
    accuracy: float
    diagnostics_count: int
    supported_diseases: int
    last_updated: Optional[datetime] = None


class ModelVersionOut(CamelModel):
    id: int
    version: int
    status: str
    accuracy: float
    is_active: bool
    created_at: Optional[datetime] = None
