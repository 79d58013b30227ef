from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from mall_admin.models.base import Base, TimestampMixin, AuditMixin


class CategoryStatus:
    DISABLED = 0
    ENABLED = 1


class Category(Base, TimestampMixin, AuditMixin):
    """
    Product categories arranged as a tree of at most 5 levels

    Example:
    - Electronics (level 0, path "")
      - Phones (level 1, path "/1")
        - Smartphones (level 2, path "/1/2")

    level and path are derived from the parent and maintained by
    services.category_service; they are never taken from client input.
    """
    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True, index=True)

    # Basic data
    name = Column(String(50), nullable=False)
    description = Column(String(200), nullable=True)
    icon = Column(String(100), nullable=True)
    sort = Column(Integer, default=0, nullable=False)
    status = Column(Integer, default=CategoryStatus.ENABLED, nullable=False)

    # Hierarchy (self reference)
    parent_id = Column(Integer, ForeignKey('product_categories.id'), nullable=True)
    level = Column(Integer, default=0, nullable=False)
    path = Column(String(255), default="", nullable=False)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    products = relationship("Product", back_populates="category")

    @property
    def parent_name(self):
        return self.parent.name if self.parent else None

    def __repr__(self):
        return f"<Category {self.name} level={self.level}>"

    __table_args__ = (
        Index('idx_categories_parent_sort', 'parent_id', 'sort'),
        Index('idx_categories_status_sort', 'status', 'sort'),
        Index('idx_categories_name', 'name'),
    )
