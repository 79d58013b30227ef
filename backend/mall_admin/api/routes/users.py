"""
Admin user routes (user:manage)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from mall_admin.api.deps import get_db, require_permission
from mall_admin.core.exceptions import ValidationFailed
from mall_admin.core.security import hash_password
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.user import UserCreate, UserUpdate, UserResponse
from mall_admin.api.utils import (
    get_by_id, validate_unique, paginate_query, apply_search_filter, apply_filters,
    update_entity, ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()


@router.get("/", response_model=Envelope[Page[UserResponse]])
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None, description="Search username or nickname"),
    status: Optional[int] = Query(None, ge=0, le=1),
    role: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("user:manage"))
):
    """List admin users"""
    query = db.query(AdminUser)
    query = apply_search_filter(query, keyword, AdminUser.username, AdminUser.nickname)
    query = apply_filters(query, [
        (status, AdminUser.status, "eq"),
        (role, AdminUser.role, "eq"),
    ])
    items, total = paginate_query(query, page, size, (AdminUser.created_at.desc(), AdminUser.id.desc()))
    return ok_page([UserResponse.model_validate(u) for u in items], total, page, size)


@router.get("/{user_id}", response_model=Envelope[UserResponse])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("user:manage"))
):
    target = get_by_id(db, AdminUser, user_id, error_message="User not found")
    return ok(UserResponse.model_validate(target))


@router.post("/", response_model=Envelope[UserResponse], status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("user:manage"))
):
    """Create an admin user"""
    validate_unique(db, AdminUser, "username", data.username, display_name="Username")

    new_user = AdminUser(
        **data.model_dump(exclude={"password"}),
        password_hash=hash_password(data.password)
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return ok(UserResponse.model_validate(new_user), "User created", 201)


@router.put("/{user_id}", response_model=Envelope[UserResponse])
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("user:manage"))
):
    """Update profile, role, status or password (username is fixed)"""
    target = get_by_id(db, AdminUser, user_id, error_message="User not found")

    if target.id == user.id and data.status == 0:
        raise ValidationFailed("You cannot disable your own account")

    if data.password:
        target.password_hash = hash_password(data.password)

    target = update_entity(db, target, data, exclude_fields=["password"])
    return ok(UserResponse.model_validate(target), "User updated")


@router.delete("/{user_id}", response_model=Envelope[None])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("user:manage"))
):
    target = get_by_id(db, AdminUser, user_id, error_message="User not found")
    if target.id == user.id:
        raise ValidationFailed("You cannot delete your own account")

    db.delete(target)
    db.commit()
    return ok(None, "User deleted")
