from sqlalchemy import Column, DateTime, String
from datetime import datetime
from mall_admin.database import Base


class TimestampMixin:
    """
    Mixin for temporal audit fields
    Every table gets created_at and updated_at
    """
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuditMixin:
    """
    Mixin for user audit fields
    Records the username of who created and who last updated the row
    """
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)


# Base is defined in database.py
# Re-exported here for convenience
__all__ = ['Base', 'TimestampMixin', 'AuditMixin']
