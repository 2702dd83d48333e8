# backend/routes/sales.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.sale import Sale, SaleStatus
from models.users import User, FARMER
from schemas.sale import SaleOut, SaleStats, SaleStatusUpdate
from utils.audit import client_ip, write_log
from utils.sales import InvalidTransition, change_status
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/farmer/sales", tags=["Sales"])

farmer_only = role_required(FARMER)

def sale_to_out(sale: Sale) -> SaleOut:
    farmer, buyer = sale.farmer, sale.buyer
    return SaleOut(
        id=sale.id,
        order_ref=sale.order_ref,
        product_id=sale.product_id,
        product_name=sale.product_name,
        product_image=sale.product_image,
        origin=sale.origin,
        farmer_id=sale.farmer_id,
        farmer_name=farmer.name if farmer else None,
        buyer_id=sale.buyer_id,
        buyer_name=buyer.name if buyer else None,
        buyer_email=buyer.email if buyer else None,
        buyer_phone=buyer.phone if buyer else None,
        quantity=sale.quantity,
        unit=sale.unit,
        unit_price=sale.unit_price,
        total_price=sale.total_price,
        status=sale.status,
        created_at=sale.created_at,
        harvest_date=sale.harvest_date,
        location=sale.location,
    )


@router.get("/", response_model=List[SaleOut])
def list_sales(
    status: Optional[str] = Query(None, description="Sale status or 'all'"),
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
):
    query = (
        db.query(Sale)
        .options(joinedload(Sale.buyer), joinedload(Sale.farmer))
        .filter(Sale.farmer_id == current_user.id)
    )
    if status and status != "all":
        try:
            query = query.filter(Sale.status == SaleStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown status: {status}")

    sales = query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()
    return [sale_to_out(s) for s in sales]


@router.get("/stats/", response_model=SaleStats)
def sales_stats(db: Session = Depends(get_db), current_user: User = Depends(farmer_only)):
    rows = (
        db.query(Sale.status, func.count(Sale.id), func.coalesce(func.sum(Sale.total_price), 0.0))
        .filter(Sale.farmer_id == current_user.id)
        .group_by(Sale.status)
        .all()
    )
    counts = {s: 0 for s in SaleStatus}
    revenue = 0.0
    for status, count, amount in rows:
        status = SaleStatus(status)
        counts[status] = int(count)
        if status == SaleStatus.COMPLETED:
            revenue = float(amount or 0.0)

    return SaleStats(
        total=sum(counts.values()),
        pending_payment=counts[SaleStatus.PENDING_PAYMENT],
        ready_for_shipment=counts[SaleStatus.READY_FOR_SHIPMENT],
        shipped=counts[SaleStatus.SHIPPED],
        completed=counts[SaleStatus.COMPLETED],
        cancelled=counts[SaleStatus.CANCELLED],
        total_revenue=round(revenue, 2),
    )


@router.put("/{sale_id}/status/", response_model=SaleOut)
def update_sale_status(
    sale_id: int,
    payload: SaleStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(farmer_only),
):
    sale = db.query(Sale).filter(Sale.id == sale_id, Sale.farmer_id == current_user.id).first()
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")

    previous = SaleStatus(sale.status)
    try:
        sale = change_status(db, sale, payload.status)
    except InvalidTransition as e:
        write_log(
            db, user_id=current_user.id, action="SALE_STATUS", resource="sales", status="FAIL",
            ip=client_ip(request), meta={"sale_id": sale_id, "from": previous.value, "to": payload.status.value},
        )
        raise HTTPException(status_code=400, detail=str(e))

    write_log(
        db, user_id=current_user.id, action="SALE_STATUS", resource="sales", status="SUCCESS",
        ip=client_ip(request), meta={"sale_id": sale.id, "from": previous.value, "to": sale.status.value},
    )
    return sale_to_out(sale)
