"""
Role routes (role:manage)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from mall_admin.api.deps import get_db, require_permission
from mall_admin.core.exceptions import Forbidden
from mall_admin.models.access import Role
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.access import RoleCreate, RoleUpdate, RoleResponse
from mall_admin.api.utils import (
    get_by_id, validate_unique, paginate_query, apply_search_filter,
    update_entity, ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()


@router.get("/", response_model=Envelope[Page[RoleResponse]])
def list_roles(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("role:manage"))
):
    query = apply_search_filter(db.query(Role), keyword, Role.name, Role.description)
    items, total = paginate_query(query, page, size, Role.id)
    return ok_page([RoleResponse.model_validate(r) for r in items], total, page, size)


@router.get("/{role_id}", response_model=Envelope[RoleResponse])
def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("role:manage"))
):
    return ok(RoleResponse.model_validate(get_by_id(db, Role, role_id, error_message="Role not found")))


@router.post("/", response_model=Envelope[RoleResponse], status_code=201)
def create_role(
    data: RoleCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("role:manage"))
):
    validate_unique(db, Role, "name", data.name, display_name="Role name")
    role = Role(**data.model_dump())
    db.add(role)
    db.commit()
    db.refresh(role)
    return ok(RoleResponse.model_validate(role), "Role created", 201)


@router.put("/{role_id}", response_model=Envelope[RoleResponse])
def update_role(
    role_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("role:manage"))
):
    role = get_by_id(db, Role, role_id, error_message="Role not found")
    if data.name and data.name != role.name:
        validate_unique(db, Role, "name", data.name, exclude_id=role_id, display_name="Role name")
    role = update_entity(db, role, data)
    return ok(RoleResponse.model_validate(role), "Role updated")


@router.delete("/{role_id}", response_model=Envelope[None])
def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("role:manage"))
):
    """Delete a role; system roles are protected"""
    role = get_by_id(db, Role, role_id, error_message="Role not found")
    if role.is_system:
        raise Forbidden("System roles cannot be deleted")
    db.delete(role)
    db.commit()
    return ok(None, "Role deleted")
