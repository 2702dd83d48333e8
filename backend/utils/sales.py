# backend/utils/sales.py
import uuid
import logging
from typing import Dict, List, Set

from sqlalchemy.orm import Session

from models.product import Product
from models.sale import Sale, SaleStatus
from models.users import User
from utils.cart_store import CartStore, line_qty

logger = logging.getLogger(__name__)

# Allowed status changes; completed and cancelled are terminal
ALLOWED_TRANSITIONS: Dict[SaleStatus, Set[SaleStatus]] = {
    SaleStatus.PENDING_PAYMENT: {SaleStatus.READY_FOR_SHIPMENT, SaleStatus.CANCELLED},
    SaleStatus.READY_FOR_SHIPMENT: {SaleStatus.SHIPPED, SaleStatus.CANCELLED},
    SaleStatus.SHIPPED: {SaleStatus.COMPLETED},
    SaleStatus.COMPLETED: set(),
    SaleStatus.CANCELLED: set(),
}


class InvalidTransition(Exception):
    def __init__(self, current: SaleStatus, requested: SaleStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move sale from {current.value} to {requested.value}")


class InsufficientStock(Exception):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"Insufficient stock for: {product_name}")


class EmptyCart(Exception):
    pass


def change_status(db: Session, sale: Sale, new_status: SaleStatus) -> Sale:
    current = SaleStatus(sale.status)
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, new_status)

    # Goods of a cancelled sale go back on the shelf
    if new_status == SaleStatus.CANCELLED and sale.product_id is not None:
        product = db.query(Product).filter(Product.id == sale.product_id).first()
        if product:
            product.quantity += sale.quantity

    sale.status = new_status
    db.commit()
    db.refresh(sale)
    return sale


def checkout(db: Session, buyer: User, cart: CartStore) -> List[Sale]:
    """Turn every cart line into a pending sale and empty the cart."""
    lines = cart.lines()
    if not lines:
        raise EmptyCart()

    order_ref = str(uuid.uuid4())
    sales = []
    for line in lines:
        try:
            product_id = int(line["productId"])
        except (TypeError, ValueError):
            db.rollback()
            raise InsufficientStock(line.get("name") or str(line["productId"]))
        qty = line_qty(line)
        if qty <= 0:
            continue

        product = db.query(Product).filter(Product.id == product_id).first()
        if not product or product.quantity < qty:
            db.rollback()
            raise InsufficientStock(product.name if product else (line.get("name") or str(product_id)))

        product.quantity -= qty
        # Price snapshot from the cart, falling back to the live price
        unit_price = line.get("price")
        if isinstance(unit_price, bool) or not isinstance(unit_price, (int, float)):
            unit_price = product.price
        farmer = product.farmer
        sales.append(Sale(
            order_ref=order_ref,
            product_id=product.id,
            farmer_id=product.farmer_id,
            buyer_id=buyer.id,
            product_name=product.name,
            product_image=product.image_url,
            origin=product.category,
            unit=product.unit or "kg",
            quantity=qty,
            unit_price=float(unit_price),
            total_price=round(float(unit_price) * qty, 2),
            status=SaleStatus.PENDING_PAYMENT,
            location=(farmer.location or farmer.region) if farmer else None,
        ))

    if not sales:
        raise EmptyCart()

    db.add_all(sales)
    db.commit()
    for sale in sales:
        db.refresh(sale)

    cart.clear()
    logger.info("Checkout %s created %d sales for buyer %s", order_ref, len(sales), buyer.id)
    return sales
