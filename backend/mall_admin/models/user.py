from sqlalchemy import Column, Integer, String
from mall_admin.models.base import Base, TimestampMixin


class UserStatus:
    DISABLED = 0
    ENABLED = 1


class AdminUser(Base, TimestampMixin):
    """
    Back office users

    role is a role name; permissions are resolved by core.security.TokenAuthority,
    with a matching Role row taking precedence over the configured defaults.
    """
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)

    # Credentials
    username = Column(String(20), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt

    # Profile
    nickname = Column(String(50), nullable=False)
    email = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    avatar = Column(String(500), nullable=True)

    # Access
    role = Column(String(50), default="admin", nullable=False)
    status = Column(Integer, default=UserStatus.ENABLED, nullable=False)

    def __repr__(self):
        return f"<AdminUser {self.username} ({self.role})>"
