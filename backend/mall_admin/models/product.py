from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from mall_admin.models.base import Base, TimestampMixin, AuditMixin


class ProductStatus:
    OFF_SHELF = 0
    ON_SHELF = 1


class Product(Base, TimestampMixin, AuditMixin):
    """
    Products sold in the mall

    sku is unique when present; services.product_service generates one
    (P + YYYYMMDD + 4 digits) when the client does not send it.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    # Identification
    name = Column(String(100), nullable=False)
    sku = Column(String(50), nullable=True, unique=True)
    category_id = Column(Integer, ForeignKey('product_categories.id'), nullable=False)

    # Prices
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    cost = Column(Numeric(10, 2), nullable=True)

    # Stock and sales
    stock = Column(Integer, default=0, nullable=False)
    sales = Column(Integer, default=0, nullable=False)

    # Content
    description = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    specifications = Column(JSON, nullable=False, default=dict)
    # Example: {"color": "black", "storage": "128GB"}

    # SEO
    seo_title = Column(String(100), nullable=True)
    seo_keywords = Column(String(200), nullable=True)
    seo_description = Column(String(300), nullable=True)

    # Physical data
    weight = Column(Numeric(10, 2), nullable=True)  # grams
    dimensions = Column(JSON, nullable=False, default=dict)  # {"length", "width", "height"} in cm
    brand = Column(String(50), nullable=True)
    model = Column(String(50), nullable=True)

    # Status and ordering
    status = Column(Integer, default=ProductStatus.ON_SHELF, nullable=False)
    sort = Column(Integer, default=0, nullable=False)

    # Recommendation flags
    is_recommended = Column(Boolean, default=False, nullable=False)
    is_hot = Column(Boolean, default=False, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_new = Column(Boolean, default=True, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="products")

    @property
    def category_name(self):
        return self.category.name if self.category else ""

    @property
    def profit_margin(self) -> float:
        """Margin in percent, two decimals; 0 when cost or price is missing"""
        if self.cost and self.price:
            return round(float((self.price - self.cost) / self.price * 100), 2)
        return 0

    @property
    def primary_image(self):
        return self.images[0] if self.images else None

    def __repr__(self):
        return f"<Product {self.sku} - {self.name}>"

    __table_args__ = (
        Index('idx_products_category_status_sort', 'category_id', 'status', 'sort'),
        Index('idx_products_status_created', 'status', 'created_at'),
        Index('idx_products_price', 'price'),
        Index('idx_products_sales', 'sales'),
    )
