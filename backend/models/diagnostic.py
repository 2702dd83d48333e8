# backend/models/diagnostic.py
from sqlalchemy import Column, Integer, String, Float, Text, Boolean, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Disease the classifier is able to recognise
class Disease(Base):
    __tablename__ = "diseases"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    treatment = Column(JSON, nullable=True) # List of recommended steps
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# A trained or uploaded classifier; only one version is active at a time
class ModelVersion(Base):
    __tablename__ = "model_versions"

    id = Column(Integer, primary_key=True, index=True)
    version = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False) # trained | uploaded
    accuracy = Column(Float, nullable=False, default=0.0)
    file_path = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# Result of one photo analysis requested by a farmer
class Diagnostic(Base):
    __tablename__ = "diagnostics"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    parcel_id = Column(Integer, ForeignKey("parcels.id", ondelete="SET NULL"), nullable=True)
    model_version_id = Column(Integer, ForeignKey("model_versions.id"), nullable=True)
    image_url = Column(String, nullable=True)
    disease = Column(String, nullable=False)
    confidence = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    treatment = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User")
