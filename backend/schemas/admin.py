from pydantic import BaseModel, ConfigDict
from typing import Any, List, Optional
from datetime import datetime

from schemas.user import UserResponse


class AdminStats(BaseModel):
    total_users: int
    farmers: int
    buyers: int
    orders_this_month: int
    revenue: float
    diagnostics: int

    # Month over month change, in percent
    users_trend: float
    farmers_trend: float
    buyers_trend: float
    orders_trend: float
    revenue_trend: float
    diagnostics_trend: float


class ActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None


class ActivityPage(BaseModel):
    results: List[ActivityOut]
    total: int
    page: int
    page_size: int


# Schema for paginated user list response
class PaginatedUsersResponse(BaseModel):
    results: List[UserResponse]
    total: int
    page: int
    page_size: int
