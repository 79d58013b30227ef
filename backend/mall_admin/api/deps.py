from typing import List, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from mall_admin.database import get_db
from mall_admin.core.exceptions import Forbidden, Unauthorized
from mall_admin.core.security import TokenAuthority
from mall_admin.models.user import AdminUser, UserStatus
from mall_admin.models.access import Role

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "get_db",
    "get_token_authority",
    "get_current_user",
    "get_current_permissions",
    "permissions_for_user",
    "require_permission",
    "get_client_ip",
]


def get_token_authority(request: Request) -> TokenAuthority:
    """
    TokenAuthority built from Settings at application start
    """
    return request.app.state.token_authority


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authority: TokenAuthority = Depends(get_token_authority),
    db: Session = Depends(get_db)
) -> AdminUser:
    """
    Return the AdminUser behind the bearer token
    Missing or invalid token -> 401, disabled user -> 403
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")

    payload = authority.decode_access_token(credentials.credentials)
    user_id = payload.get("user_id")
    if user_id is None:
        raise Unauthorized("Invalid token payload")

    user = db.query(AdminUser).filter(AdminUser.id == user_id).first()
    if not user:
        raise Unauthorized("User no longer exists")
    if user.status != UserStatus.ENABLED:
        raise Forbidden("User is disabled")
    return user


def permissions_for_user(db: Session, authority: TokenAuthority, user: AdminUser) -> List[str]:
    """
    Permission codes of a user
    A Role row named like the user's role overrides the configured mapping
    """
    role = db.query(Role).filter(Role.name == user.role).first()
    return authority.permissions_for(user.role, role.permissions if role else None)


def get_current_permissions(
    user: AdminUser = Depends(get_current_user),
    authority: TokenAuthority = Depends(get_token_authority),
    db: Session = Depends(get_db)
) -> List[str]:
    return permissions_for_user(db, authority, user)


def require_permission(code: str):
    """
    Dependency factory that requires a permission code (or the "*" wildcard)

    Usage:
        user: AdminUser = Depends(require_permission("category:write"))
    """
    def dependency(
        user: AdminUser = Depends(get_current_user),
        permissions: List[str] = Depends(get_current_permissions)
    ) -> AdminUser:
        if not TokenAuthority.has_permission(permissions, code):
            raise Forbidden(f"Permission denied: {code} required")
        return user

    return dependency


def get_client_ip(request: Request) -> Optional[str]:
    """Client address, honouring X-Forwarded-For behind a proxy"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
