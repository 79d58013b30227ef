from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from datetime import datetime
from mall_admin.models.base import Base


class Role(Base):
    """
    Named set of permission codes

    System roles (is_system=True) are seeded by the platform and cannot be deleted.
    """
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    permissions = Column(JSON, nullable=False, default=list)  # ["product:write", ...] or ["*"]
    is_system = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Role {self.name}>"


class Permission(Base):
    """Permission catalogue entry (name + code)"""
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    code = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Permission {self.code}>"


class Resource(Base):
    """Menu entries, pages and API endpoints the admin UI protects"""
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    type = Column(String(30), nullable=False)  # menu, page, api, button
    url = Column(String(255), nullable=False)
    description = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Resource {self.name} {self.url}>"
