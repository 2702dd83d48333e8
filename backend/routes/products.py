# backend/routes/products.py
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.product import Product
from models.users import User
import schemas.product as product_schemas

router = APIRouter(prefix="/api/products", tags=["Products"])

CATEGORIES = ["Légumes", "Fruits", "Céréales", "Autres"]

def product_to_out(p: Product) -> product_schemas.ProductOut:
    return product_schemas.ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        category=p.category,
        price=p.price,
        unit=p.unit or "kg",
        quantity=p.quantity,
        rating=p.rating or 0.0,
        image_url=p.image_url,
        farmer=p.farmer_id,
        farmer_name=p.farmer_name,
        region=p.region,
        created_at=p.created_at,
    )


# =========================
# PRODUCT LIST
# =========================
@router.get("/", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name, farmer or region"),
    category: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    farmer: Optional[int] = Query(None, description="Only this farmer's products"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    available_only: bool = Query(True),
    page: int = Query(1, ge=1),
    page_size: int = Query(24, ge=1, le=200),
    sort_by: Literal["name", "price", "created_at", "rating"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    query = db.query(Product).join(User, Product.farmer_id == User.id).options(joinedload(Product.farmer))

    if available_only:
        query = query.filter(Product.quantity > 0)

    if q:
        like = f"%{q.strip()}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                User.name.ilike(like),
                User.region.ilike(like),
            )
        )

    if category and category.lower() != "all":
        query = query.filter(Product.category.ilike(category))
    if region and region.lower() != "all":
        query = query.filter(User.region.ilike(region))
    if farmer is not None:
        query = query.filter(Product.farmer_id == farmer)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    allowed = {
        "name": Product.name,
        "price": Product.price,
        "created_at": Product.created_at,
        "rating": Product.rating,
    }
    sort_col = allowed.get(sort_by, Product.created_at)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc(), Product.id.asc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "results": [product_to_out(p) for p in items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/categories/", response_model=List[str])
def get_product_categories(db: Session = Depends(get_db)):
    values = db.query(Product.category).distinct().filter(Product.category != None, Product.category != "").all()
    found = [v[0] for v in values]
    # Known categories first, in UI order
    return [c for c in CATEGORIES if c in found] + sorted(c for c in found if c not in CATEGORIES)


@router.get("/{product_id}/", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product_to_out(product)
