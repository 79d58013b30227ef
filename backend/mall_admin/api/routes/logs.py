"""
Operation log routes

Any signed-in user can browse the log; writing and deleting entries
needs log:manage.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime, time, timedelta
from mall_admin.api.deps import get_db, get_client_ip, get_current_user, require_permission
from mall_admin.models.operation_log import OperationLog
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.operation_log import OperationLogCreate, OperationLogResponse
from mall_admin.services.audit import write_log
from mall_admin.api.utils import (
    get_by_id, paginate_query, apply_filters, ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()


@router.get("/", response_model=Envelope[Page[OperationLogResponse]])
def list_logs(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    user_id: Optional[int] = Query(None),
    operation: Optional[str] = Query(None, description="Partial match, e.g. LOGIN"),
    target: Optional[str] = Query(None, description="Partial match, e.g. categories"),
    date_from: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    date_to: Optional[date] = Query(None, description="YYYY-MM-DD, inclusive"),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """Newest entries first"""
    query = apply_filters(db.query(OperationLog), [
        (user_id, OperationLog.user_id, "eq"),
        (operation, OperationLog.operation, "like"),
        (target, OperationLog.target, "like"),
    ])
    if date_from:
        query = query.filter(OperationLog.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.filter(OperationLog.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    items, total = paginate_query(query, page, size, (OperationLog.created_at.desc(), OperationLog.id.desc()))
    return ok_page([OperationLogResponse.model_validate(entry) for entry in items], total, page, size)


@router.post("/", response_model=Envelope[OperationLogResponse], status_code=201)
def create_log(
    data: OperationLogCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("log:manage"))
):
    """Record an entry; user and ip default to the caller"""
    entry = write_log(
        db,
        user_id=data.user_id or user.id,
        operation=data.operation,
        target=data.target,
        detail=data.detail,
        ip=data.ip or get_client_ip(request),
    )
    db.refresh(entry)
    return ok(OperationLogResponse.model_validate(entry), "Log recorded", 201)


@router.delete("/{log_id}", response_model=Envelope[None])
def delete_log(
    log_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("log:manage"))
):
    entry = get_by_id(db, OperationLog, log_id, error_message="Log entry not found")
    db.delete(entry)
    db.commit()
    return ok(None, "Log entry deleted")
