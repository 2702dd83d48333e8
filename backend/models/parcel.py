# backend/models/parcel.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, Date, DateTime, Text, Enum, func
from sqlalchemy.orm import relationship
from database import Base

# Crop health as reported by the farmer
class HealthState(str, enum.Enum):
    EXCELLENT = "excellent"
    BON = "bon"
    MOYEN = "moyen"
    CRITIQUE = "critique"

# A cultivated plot tracked by a farmer
class Parcel(Base):
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True)
    farmer_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    nom = Column(String, nullable=False)
    culture = Column(String, nullable=False)
    localisation = Column(String, nullable=True)
    superficie = Column(Float, nullable=False) # Hectares
    date_plantation = Column(Date, nullable=True)
    stade = Column(String, nullable=True) # Growth stage
    etat_sante = Column(Enum(HealthState), default=HealthState.BON, nullable=False)
    notes = Column(Text, nullable=True)
    photo = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    farmer = relationship("User", back_populates="parcels")
