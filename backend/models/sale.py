# backend/models/sale.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Date, Enum, func
from sqlalchemy.orm import relationship
from database import Base

# Lifecycle states of a sale, from checkout to delivery
class SaleStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    READY_FOR_SHIPMENT = "ready_for_shipment"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

# Represents one product line bought by a buyer from a farmer.
# Product details are copied at checkout so the record survives product edits.
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    order_ref = Column(String(36), index=True, nullable=False) # Groups the lines of one checkout
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    farmer_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    buyer_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    # Snapshot of the product at checkout
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    origin = Column(String, nullable=True)
    unit = Column(String, nullable=False, default="kg")
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    status = Column(Enum(SaleStatus), default=SaleStatus.PENDING_PAYMENT, nullable=False, index=True)
    harvest_date = Column(Date, nullable=True)
    location = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product")
    farmer = relationship("User", foreign_keys=[farmer_id])
    buyer = relationship("User", foreign_keys=[buyer_id])
