from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import date, datetime

from models.sale import SaleStatus


# camelCase on the wire, snake_case in Python
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# A sale as shown to the farmer (mes ventes) and the buyer (mes commandes)
class SaleOut(CamelModel):
    id: int
    order_ref: str
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    origin: Optional[str] = None
    farmer_id: int
    farmer_name: Optional[str] = None
    buyer_id: int
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    quantity: int
    unit: str
    unit_price: float
    total_price: float
    status: SaleStatus
    created_at: Optional[datetime] = None
    harvest_date: Optional[date] = None
    location: Optional[str] = None


# Schema for updating sale status
class SaleStatusUpdate(BaseModel):
    status: SaleStatus


# Counters displayed above the farmer's sales table; the client reads the
# status counters in snake_case and only the revenue in camelCase
class SaleStats(BaseModel):
    total: int
    pending_payment: int
    ready_for_shipment: int
    shipped: int
    completed: int
    cancelled: int
    total_revenue: float = Field(serialization_alias="totalRevenue")


class CheckoutResponse(CamelModel):
    order_ref: str
    sales: List[SaleOut]
    total_price: float
