# backend/routes/admin.py
from datetime import datetime, timedelta, timezone
from typing import List, Literal, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.diagnostic import Diagnostic
from models.log import Log
from models.product import Product
from models.sale import Sale, SaleStatus
from models.users import User, ADMIN, BUYER, FARMER
from routes.products import product_to_out
from schemas.admin import ActivityOut, ActivityPage, AdminStats, PaginatedUsersResponse
from schemas.product import ProductListPage
from schemas.user import RoleUpdate
from utils.audit import client_ip, write_log
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/admin", tags=["Admin"])

admin_only = role_required(ADMIN)


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Start of the current month and of the previous one (naive UTC)."""
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_month = (this_month - timedelta(days=1)).replace(day=1)
    return this_month, last_month


def trend(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


# === Dashboard figures ===

@router.get("/stats/", response_model=AdminStats)
def get_stats(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    this_month, last_month = month_bounds(now)

    def users_between(start, end, role=None):
        q = db.query(func.count(User.id)).filter(User.created_at >= start, User.created_at < end)
        if role:
            q = q.filter(User.role == role)
        return q.scalar() or 0

    def orders_between(start, end):
        return (
            db.query(func.count(func.distinct(Sale.order_ref)))
            .filter(Sale.created_at >= start, Sale.created_at < end, Sale.status != SaleStatus.CANCELLED)
            .scalar() or 0
        )

    def revenue_between(start, end):
        return float(
            db.query(func.coalesce(func.sum(Sale.total_price), 0.0))
            .filter(Sale.status == SaleStatus.COMPLETED, Sale.updated_at >= start, Sale.updated_at < end)
            .scalar() or 0.0
        )

    def diagnostics_between(start, end):
        return (
            db.query(func.count(Diagnostic.id))
            .filter(Diagnostic.created_at >= start, Diagnostic.created_at < end)
            .scalar() or 0
        )

    far_future = now + timedelta(days=1)
    total_revenue = (
        db.query(func.coalesce(func.sum(Sale.total_price), 0.0))
        .filter(Sale.status == SaleStatus.COMPLETED)
        .scalar()
    )

    return AdminStats(
        total_users=db.query(func.count(User.id)).scalar() or 0,
        farmers=db.query(func.count(User.id)).filter(User.role == FARMER).scalar() or 0,
        buyers=db.query(func.count(User.id)).filter(User.role == BUYER).scalar() or 0,
        orders_this_month=orders_between(this_month, far_future),
        revenue=round(float(total_revenue or 0.0), 2),
        diagnostics=db.query(func.count(Diagnostic.id)).scalar() or 0,
        users_trend=trend(users_between(this_month, far_future), users_between(last_month, this_month)),
        farmers_trend=trend(users_between(this_month, far_future, FARMER), users_between(last_month, this_month, FARMER)),
        buyers_trend=trend(users_between(this_month, far_future, BUYER), users_between(last_month, this_month, BUYER)),
        orders_trend=trend(orders_between(this_month, far_future), orders_between(last_month, this_month)),
        revenue_trend=trend(revenue_between(this_month, far_future), revenue_between(last_month, this_month)),
        diagnostics_trend=trend(diagnostics_between(this_month, far_future), diagnostics_between(last_month, this_month)),
    )


# === Activity stream (audit log) ===

@router.get("/activities/", response_model=ActivityPage)
def get_activities(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status.upper())

    if date_from:
        try:
            query = query.filter(Log.ts >= datetime.fromisoformat(date_from))
        except ValueError:
            raise HTTPException(status_code=400, detail="date_from must be YYYY-MM-DD")
    if date_to:
        try:
            dt_to_str = date_to
            # Whole final day is included
            if len(dt_to_str) == 10:
                dt_to_str += " 23:59:59"
            query = query.filter(Log.ts <= datetime.fromisoformat(dt_to_str))
        except ValueError:
            raise HTTPException(status_code=400, detail="date_to must be YYYY-MM-DD")

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    results = []
    for entry in logs:
        out = ActivityOut.model_validate(entry)
        out.user_name = entry.user.name if entry.user else None
        results.append(out)

    return {"results": results, "total": total, "page": page, "page_size": page_size}


# === Users ===

@router.get("/users/", response_model=PaginatedUsersResponse)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by e-mail or name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    region: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "name", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.email.ilike(like) | User.name.ilike(like))
    if role:
        query = query.filter(User.role == role.lower())
    if region:
        query = query.filter(User.region.ilike(region))

    sort_map = {
        "id": User.id,
        "email": User.email,
        "role": User.role,
        "name": User.name,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"results": users, "total": total, "page": page, "page_size": page_size}


@router.put("/users/{user_id}/role/")
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    old_role = user.role
    user.role = new_role.role
    db.commit()
    db.refresh(user)

    write_log(
        db, user_id=current_user.id, action="USER_ROLE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"target": user.id, "from": old_role, "to": user.role},
    )
    return {"message": f"User {user.email} role updated to {user.role}", "id": user.id, "role": user.role}


@router.delete("/users/{user_id}/")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    email = user.email
    db.delete(user)
    try:
        db.commit()
    except IntegrityError:
        # Sales and conversations keep pointing at the account
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User has related sales or messages")

    write_log(
        db, user_id=current_user.id, action="USER_DELETE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"target": user_id, "email": email},
    )
    return {"message": f"User {email} deleted"}


# === Products moderation ===

@router.get("/products/", response_model=ProductListPage)
def admin_list_products(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(Product)
    if q:
        query = query.filter(Product.name.ilike(f"%{q}%"))
    query = query.order_by(Product.id.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"results": [product_to_out(p) for p in items], "total": total, "page": page, "page_size": page_size}


@router.delete("/products/{product_id}/")
def admin_delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    pname = product.name
    db.delete(product)
    db.commit()
    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products", status="SUCCESS",
        ip=client_ip(request), meta={"id": product_id, "by": "admin"},
    )
    return {"detail": f"Product '{pname}' deleted"}
