"""
Permission catalogue routes (permission:manage)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from mall_admin.api.deps import get_db, require_permission
from mall_admin.models.access import Permission
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.access import PermissionCreate, PermissionUpdate, PermissionResponse
from mall_admin.api.utils import (
    get_by_id, validate_unique, paginate_query, apply_search_filter,
    update_entity, ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()


@router.get("/", response_model=Envelope[Page[PermissionResponse]])
def list_permissions(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None, description="Search name or code"),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("permission:manage"))
):
    query = apply_search_filter(db.query(Permission), keyword, Permission.name, Permission.code)
    items, total = paginate_query(query, page, size, Permission.code)
    return ok_page([PermissionResponse.model_validate(p) for p in items], total, page, size)


@router.post("/", response_model=Envelope[PermissionResponse], status_code=201)
def create_permission(
    data: PermissionCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("permission:manage"))
):
    validate_unique(db, Permission, "name", data.name, display_name="Permission name")
    validate_unique(db, Permission, "code", data.code, display_name="Permission code")
    permission = Permission(**data.model_dump())
    db.add(permission)
    db.commit()
    db.refresh(permission)
    return ok(PermissionResponse.model_validate(permission), "Permission created", 201)


@router.put("/{permission_id}", response_model=Envelope[PermissionResponse])
def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("permission:manage"))
):
    permission = get_by_id(db, Permission, permission_id, error_message="Permission not found")
    if data.name and data.name != permission.name:
        validate_unique(db, Permission, "name", data.name, exclude_id=permission_id, display_name="Permission name")
    if data.code and data.code != permission.code:
        validate_unique(db, Permission, "code", data.code, exclude_id=permission_id, display_name="Permission code")
    permission = update_entity(db, permission, data)
    return ok(PermissionResponse.model_validate(permission), "Permission updated")


@router.delete("/{permission_id}", response_model=Envelope[None])
def delete_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("permission:manage"))
):
    permission = get_by_id(db, Permission, permission_id, error_message="Permission not found")
    db.delete(permission)
    db.commit()
    return ok(None, "Permission deleted")
