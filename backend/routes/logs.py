# backend/routes/logs.py
from datetime import date, datetime, time, timedelta
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from models.users import User
from services.movements import parse_day
from utils.tokenJWT import role_required
from utils.response import respond_success
from schemas.common import ApiResponse

router = APIRouter(prefix="/logs", tags=["Logs"])


class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)


class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int


def log_conditions(action: Optional[str] = None, user_id: Optional[int] = None, resource: Optional[str] = None,
                   status: Optional[str] = None, since: Optional[date] = None, until: Optional[date] = None) -> list:
    """SQL conditions for the audit filters; days are whole UTC days, both ends inclusive."""
    conditions = []
    if action:
        conditions.append(Log.action.ilike(f"%{action}%"))
    if resource:
        conditions.append(Log.resource.ilike(f"%{resource}%"))
    if user_id is not None:
        conditions.append(Log.user_id == user_id)
    if status:
        conditions.append(Log.status == status.upper())
    if since:
        conditions.append(Log.ts >= datetime.combine(since, time.min))
    if until:
        conditions.append(Log.ts < datetime.combine(until + timedelta(days=1), time.min))
    return conditions


@router.get("", response_model=ApiResponse[LogPage])
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD), inclusive"),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    conditions = log_conditions(action, user_id, resource, status,
                                parse_day(date_from, "date_from"), parse_day(date_to, "date_to"))

    entries = db.query(Log).filter(*conditions)
    total = entries.count()
    items = (
        entries.order_by(Log.ts.desc(), Log.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    page_data = LogPage(
        items=[LogResponse.model_validate(entry) for entry in items],
        total=total,
        page=page,
        page_size=page_size,
    )
    return respond_success(page_data, "Logs fetched successfully")
