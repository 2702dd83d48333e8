from typing import Optional
from datetime import date, datetime

from models.parcel import HealthState
from schemas.sale import CamelModel


# Cultivated plot; field names follow the French UI (nom, culture, etatSante...)
class ParcelOut(CamelModel):
    id: int
    nom: str
    culture: str
    localisation: Optional[str] = None
    superficie: float
    date_plantation: Optional[date] = None
    stade: Optional[str] = None
    etat_sante: HealthState
    notes: Optional[str] = None
    photo: Optional[str] = None
    created_at: Optional[datetime] = None
