"""
System models

Every model registers itself on Base.metadata when imported here,
so init_db() and the test fixtures can create the whole schema.
"""

from mall_admin.models.base import Base, TimestampMixin, AuditMixin
from mall_admin.models.category import Category, CategoryStatus
from mall_admin.models.product import Product, ProductStatus
from mall_admin.models.user import AdminUser, UserStatus
from mall_admin.models.access import Role, Permission, Resource
from mall_admin.models.operation_log import OperationLog

__all__ = [
    "Base",
    "TimestampMixin",
    "AuditMixin",
    "Category",
    "CategoryStatus",
    "Product",
    "ProductStatus",
    "AdminUser",
    "UserStatus",
    "Role",
    "Permission",
    "Resource",
    "OperationLog",
]
