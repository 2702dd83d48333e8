# backend/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from models.users import User, BUYER
from schemas.cart import CartAddItem, CartCount, CartOut
from utils.audit import client_ip, write_log
from utils.cart_store import CartStore, cart_for_user
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/cart", tags=["Cart"])

buyer_only = role_required(BUYER)

def _cart_to_out(cart: CartStore) -> CartOut:
    return CartOut(items=cart.lines(), count=cart.get_count(), total=cart.total())

@router.get("/", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    return _cart_to_out(cart_for_user(db, current_user.id))

@router.get("/count/", response_model=CartCount)
def get_cart_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    return CartCount(count=cart_for_user(db, current_user.id).get_count())

@router.post("/add/", response_model=CartOut, status_code=status.HTTP_200_OK)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    try:
        product_id = int(payload.productId)
    except (TypeError, ValueError):
        raise HTTPException(status_code=404, detail="Product not found")

    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = cart_for_user(db, current_user.id)
    line = cart.add_to_cart(product.id, {"name": product.name, "price": product.price})

    out = _cart_to_out(cart)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product.id, "qty": line["qty"], "count": out.count},
    )
    return out

@router.delete("/", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    cart = cart_for_user(db, current_user.id)
    cart.clear()
    write_log(
        db,
        user_id=current_user.id,
        action="CART_CLEAR",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
    )
    return _cart_to_out(cart)
