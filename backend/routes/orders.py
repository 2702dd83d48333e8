# backend/routes/orders.py
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.sale import Sale
from models.users import User, BUYER
from routes.sales import sale_to_out
from schemas.sale import CheckoutResponse, SaleOut
from utils.audit import client_ip, write_log
from utils.cart_store import cart_for_user
from utils.sales import EmptyCart, InsufficientStock, checkout
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/buyer/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

buyer_only = role_required(BUYER)


# Buyer checkout: every cart line becomes a sale awaiting payment
@router.post("/", response_model=CheckoutResponse, status_code=201)
def create_order(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(buyer_only),
):
    cart = cart_for_user(db, current_user.id)
    try:
        sales = checkout(db, current_user, cart)
    except EmptyCart:
        raise HTTPException(status_code=400, detail="Cart is empty")
    except InsufficientStock as e:
        logger.info("Checkout refused for buyer %s: %s", current_user.id, e)
        write_log(
            db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="FAIL",
            ip=client_ip(request), meta={"reason": str(e)},
        )
        raise HTTPException(status_code=400, detail=str(e))

    total = round(sum(s.total_price for s in sales), 2)
    write_log(
        db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={"order_ref": sales[0].order_ref, "sales": [s.id for s in sales], "total": total},
    )
    return CheckoutResponse(
        order_ref=sales[0].order_ref,
        sales=[sale_to_out(s) for s in sales],
        total_price=total,
    )


@router.get("/", response_model=List[SaleOut])
def list_my_orders(db: Session = Depends(get_db), current_user: User = Depends(buyer_only)):
    sales = (
        db.query(Sale)
        .options(joinedload(Sale.farmer), joinedload(Sale.buyer))
        .filter(Sale.buyer_id == current_user.id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .all()
    )
    return [sale_to_out(s) for s in sales]
