# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Produce listed on the marketplace by a farmer.
# Price is expressed in MRU per unit; quantity is the stock still for sale.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    farmer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    unit = Column(String, nullable=False, default="kg")
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)

    rating = Column(Float, nullable=False, default=0.0)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    farmer = relationship("User", back_populates="products")

    @property
    def farmer_name(self):
        return self.farmer.name if self.farmer else None

    @property
    def region(self):
        return self.farmer.region if self.farmer else None
