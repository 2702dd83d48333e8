# backend/models/users.py
from sqlalchemy import Column, Integer, String, Float, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Platform roles
FARMER = "farmer"
BUYER = "buyer"
ADMIN = "admin"
ROLES = (FARMER, BUYER, ADMIN)

# Represents a user account: a farmer selling produce, a buyer, or an administrator
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)

    # Location data shown on the farmers map
    region = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    profile_photo = Column(String, nullable=True)
    rating = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="farmer", cascade="all, delete-orphan")
    parcels = relationship("Parcel", back_populates="farmer", cascade="all, delete-orphan")

    @property
    def is_farmer(self) -> bool:
        return (self.role or "").lower() == FARMER

    @property
    def is_buyer(self) -> bool:
        return (self.role or "").lower() == BUYER

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == ADMIN
