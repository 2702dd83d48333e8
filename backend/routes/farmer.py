# backend/routes/farmer.py
import math
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, Form
from sqlalchemy import func
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr

from database import get_db
from models.product import Product
from models.users import User, FARMER
from routes.farmers import completed_sales_totals
from routes.products import product_to_out
import schemas.product as product_schemas
from utils.audit import client_ip, write_log
from utils.tokenJWT import role_required
from utils.uploads import remove_image, save_image

router = APIRouter(prefix="/api/farmer", tags=["Farmer"])

farmer_only = role_required(FARMER)


class FarmerProfileOut(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    region: Optional[str] = None
    user_type: str = "Agriculteur"
    join_date: Optional[str] = None
    total_sales: int
    total_revenue: float
    rating: float


class FarmerProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    region: Optional[str] = None


def _profile_out(db: Session, user: User) -> FarmerProfileOut:
    total_sales, total_revenue = completed_sales_totals(db, user.id)
    return FarmerProfileOut(
        name=user.name,
        email=user.email,
        phone=user.phone,
        region=user.region,
        join_date=user.created_at.isoformat() if user.created_at else None,
        total_sales=total_sales,
        total_revenue=total_revenue,
        rating=user.rating or 0.0,
    )


# =========================
# PROFILE
# =========================
@router.get("/profile/", response_model=FarmerProfileOut)
def get_profile(db: Session = Depends(get_db), current_user: User = Depends(farmer_only)):
    return _profile_out(db, current_user)


@router.put("/profile/", response_model=FarmerProfileOut)
def update_profile(
    payload: FarmerProfileUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
):
    if payload.email is not None:
        email = payload.email.strip().lower()
        clash = db.query(User).filter(func.lower(User.email) == email, User.id != current_user.id).first()
        if clash:
            raise HTTPException(status_code=400, detail="Email already registered")
        current_user.email = email
    if payload.name is not None:
        if not payload.name.strip():
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        current_user.name = payload.name.strip()
    if payload.phone is not None:
        current_user.phone = payload.phone
    if payload.region is not None:
        current_user.region = payload.region

    db.commit()
    db.refresh(current_user)

    write_log(
        db, user_id=current_user.id, action="PROFILE_UPDATE", resource="farmer",
        status="SUCCESS", ip=client_ip(request),
        meta={"fields": sorted(payload.model_dump(exclude_none=True).keys())},
    )
    return _profile_out(db, current_user)


# =========================
# OWN PRODUCTS
# =========================
def _own_product(db: Session, farmer: User, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.farmer_id == farmer.id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/products/", response_model=List[product_schemas.ProductOut])
def list_own_products(db: Session = Depends(get_db), current_user: User = Depends(farmer_only)):
    products = (
        db.query(Product)
        .filter(Product.farmer_id == current_user.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    return [product_to_out(p) for p in products]


@router.post("/products/", response_model=product_schemas.ProductOut, status_code=201)
def create_product(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
    file: Optional[UploadFile] = File(None),
    name: str = Form(...),
    price: float = Form(...),
    quantity: int = Form(...),
    unit: str = Form("kg"),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
):
    if not name.strip():
        raise HTTPException(status_code=400, detail="Name cannot be empty")
    if not math.isfinite(price) or price < 0:
        raise HTTPException(status_code=400, detail="Price must be >= 0")
    if quantity < 0:
        raise HTTPException(status_code=400, detail="Quantity must be >= 0")

    image_url = save_image(file, "products") if file and file.filename else None

    product = Product(
        farmer_id=current_user.id,
        name=name.strip(),
        price=price,
        quantity=quantity,
        unit=unit or "kg",
        category=category,
        description=description,
        image_url=image_url,
    )
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "name": product.name},
    )
    return product_to_out(product)


@router.put("/products/{product_id}/", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    quantity: Optional[int] = Form(None),
    unit: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
):
    p = _own_product(db, current_user, product_id)

    if file and file.filename:
        new_url = save_image(file, "products")
        remove_image(p.image_url)
        p.image_url = new_url

    if name is not None:
        if not name.strip():
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        p.name = name.strip()
    if price is not None:
        if not math.isfinite(price) or price < 0:
            raise HTTPException(status_code=400, detail="Price must be >= 0")
        p.price = price
    if quantity is not None:
        if quantity < 0:
            raise HTTPException(status_code=400, detail="Quantity must be >= 0")
        p.quantity = quantity
    if unit is not None: p.unit = unit
    if category is not None: p.category = category
    if description is not None: p.description = description

    db.commit()
    db.refresh(p)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": p.id},
    )
    return product_to_out(p)


@router.delete("/products/{product_id}/")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
):
    product = _own_product(db, current_user, product_id)
    pid, pname, image_url = product.id, product.name, product.image_url
    db.delete(product)
    db.commit()
    remove_image(image_url)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": pid},
    )
    return {"detail": f"Product '{pname}' deleted"}
