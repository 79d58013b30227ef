import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List
from mall_admin.api.deps import (
    get_db, get_client_ip, get_current_user, get_current_permissions,
    get_token_authority, permissions_for_user
)
from mall_admin.core.exceptions import Forbidden, Unauthorized
from mall_admin.core.security import TokenAuthority, verify_password
from mall_admin.models.user import AdminUser, UserStatus
from mall_admin.schemas.common import Envelope
from mall_admin.schemas.user import LoginRequest, LoginResponse, UserResponse, CurrentUserResponse
from mall_admin.services.audit import write_log
from mall_admin.api.utils import ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Envelope[LoginResponse])
def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    authority: TokenAuthority = Depends(get_token_authority)
):
    """
    Authenticate an admin user

    Flow:
    1. Find the user by username
    2. Check the password
    3. Reject disabled accounts
    4. Issue a JWT with user_id, username and role and record a LOGIN entry
    """
    user = db.query(AdminUser).filter(AdminUser.username == credentials.username.strip()).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %r", credentials.username)
        raise Unauthorized("Invalid username or password")

    if user.status != UserStatus.ENABLED:
        raise Forbidden("User is disabled")

    token = authority.create_access_token(
        data={
            "user_id": user.id,
            "username": user.username,
            "role": user.role
        }
    )

    write_log(db, user_id=user.id, operation="LOGIN", target="auth",
              detail=f"{user.username} logged in", ip=get_client_ip(request))

    return ok({
        "token": token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user),
        "permissions": permissions_for_user(db, authority, user),
        "roles": [user.role]
    }, "Login successful")


@router.get("/me", response_model=Envelope[CurrentUserResponse])
def me(
    user: AdminUser = Depends(get_current_user),
    permissions: List[str] = Depends(get_current_permissions)
):
    """Profile and permission codes of the token's user"""
    current = CurrentUserResponse.model_validate(user)
    current.permissions = permissions
    return ok(current)
