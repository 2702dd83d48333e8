# backend/schemas/product.py
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Marketplace view of a product
class ProductOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    unit: str = "kg"
    quantity: int
    rating: float = 0.0
    image_url: Optional[str] = None
    farmer: int
    farmer_name: Optional[str] = None
    region: Optional[str] = None
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(BaseModel):
    results: List[ProductOut]
    total: int
    page: int
    page_size: int


# Product as shown on a farmer's public profile
class FarmerProductOut(BaseModel):
    id: int
    name: str
    price: float
    unit: str
    quantity: int
    category: Optional[str] = None
    status: str # available | outOfStock
    image: Optional[str] = None
