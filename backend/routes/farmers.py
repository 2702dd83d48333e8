# backend/routes/farmers.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload
from pydantic import BaseModel

from database import get_db
from models.product import Product
from models.sale import Sale, SaleStatus
from models.users import User, FARMER
from schemas.product import FarmerProductOut

router = APIRouter(prefix="/api/farmers", tags=["Farmers"])


# Entry of the farmers directory / map
class FarmerSummary(BaseModel):
    id: int
    name: str
    region: Optional[str] = None
    location: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    products: List[str]
    hasProducts: bool


class FarmerProfile(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    region: Optional[str] = None
    profile_image: Optional[str] = None
    joinDate: Optional[str] = None
    rating: float
    totalProducts: int
    availableProducts: int
    totalSales: int
    totalRevenue: float
    products: List[FarmerProductOut]


def completed_sales_totals(db: Session, farmer_id: int):
    """Number and revenue of a farmer's completed sales."""
    count, revenue = (
        db.query(func.count(Sale.id), func.coalesce(func.sum(Sale.total_price), 0.0))
        .filter(Sale.farmer_id == farmer_id, Sale.status == SaleStatus.COMPLETED)
        .one()
    )
    return int(count or 0), round(float(revenue or 0.0), 2)


@router.get("/", response_model=List[FarmerSummary])
def list_farmers(
    q: Optional[str] = Query(None, description="Search by name or region"),
    region: Optional[str] = Query(None),
    has_products: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(User).filter(User.role == FARMER).options(selectinload(User.products))

    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(User.name.ilike(like), User.region.ilike(like)))
    if region and region.lower() != "all":
        query = query.filter(User.region.ilike(region))

    results = []
    for farmer in query.order_by(User.name.asc()).all():
        listed = [p.name for p in farmer.products if p.quantity > 0]
        if has_products is not None and bool(listed) != has_products:
            continue
        results.append(FarmerSummary(
            id=farmer.id,
            name=farmer.name,
            region=farmer.region,
            location=farmer.location,
            lat=farmer.lat,
            lng=farmer.lng,
            phone=farmer.phone,
            email=farmer.email,
            products=listed,
            hasProducts=bool(listed),
        ))
    return results


@router.get("/{farmer_id}/", response_model=FarmerProfile)
def get_farmer(farmer_id: int, db: Session = Depends(get_db)):
    farmer = db.query(User).filter(User.id == farmer_id, User.role == FARMER).first()
    if not farmer:
        raise HTTPException(status_code=404, detail="Farmer not found")

    products = db.query(Product).filter(Product.farmer_id == farmer.id).order_by(Product.name.asc()).all()
    total_sales, total_revenue = completed_sales_totals(db, farmer.id)

    return FarmerProfile(
        id=farmer.id,
        name=farmer.name,
        email=farmer.email,
        phone=farmer.phone,
        location=farmer.location,
        region=farmer.region,
        profile_image=farmer.profile_photo,
        joinDate=farmer.created_at.isoformat() if farmer.created_at else None,
        rating=farmer.rating or 0.0,
        totalProducts=len(products),
        availableProducts=sum(1 for p in products if p.quantity > 0),
        totalSales=total_sales,
        totalRevenue=total_revenue,
        products=[
            FarmerProductOut(
                id=p.id,
                name=p.name,
                price=p.price,
                unit=p.unit or "kg",
                quantity=p.quantity,
                category=p.category,
                status="available" if p.quantity > 0 else "outOfStock",
                image=p.image_url,
            )
            for p in products
        ],
    )
