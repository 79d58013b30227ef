from pydantic import BaseModel, Field, StringConstraints, field_validator, model_validator
from typing import Annotated, Optional, Dict, Any, List, Literal
from datetime import datetime
from decimal import Decimal

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]


class Dimensions(BaseModel):
    """Size in centimetres"""
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)


class ProductBase(BaseModel):
    """Base schema for Product"""
    name: ProductName = Field(..., description="Product name")
    category_id: int = Field(..., description="Category id (must exist and be enabled)")
    sku: Optional[str] = Field(None, max_length=50, description="Generated when omitted")
    price: Decimal = Field(..., gt=0, description="Sale price")
    original_price: Optional[Decimal] = Field(None, ge=0, description="List price, not below price")
    cost: Optional[Decimal] = Field(None, ge=0, description="Cost price")
    stock: int = Field(0, ge=0)
    description: Optional[str] = Field(None, max_length=2000)
    images: List[Annotated[str, StringConstraints(max_length=200)]] = []
    tags: List[Tag] = []
    specifications: Dict[str, Any] = {}
    seo_title: Optional[str] = Field(None, max_length=100)
    seo_keywords: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = Field(None, max_length=300)
    weight: Optional[Decimal] = Field(None, ge=0, description="Weight in grams")
    dimensions: Dimensions = Dimensions()
    brand: Optional[str] = Field(None, max_length=50)
    model: Optional[str] = Field(None, max_length=50)
    sort: int = Field(0, ge=0)

    @field_validator('sku')
    @classmethod
    def blank_sku_is_none(cls, v):
        """An empty SKU means 'generate one'"""
        if v is not None:
            v = v.strip()
        return v or None

    @field_validator('images', 'tags')
    @classmethod
    def drop_blank_entries(cls, v):
        return [item.strip() for item in v if item and item.strip()]

    @field_validator('original_price')
    @classmethod
    def zero_original_price_is_none(cls, v):
        """0 means 'no original price'"""
        return v or None

    @model_validator(mode='after')
    def validate_original_price(self):
        """Original price must not be lower than the sale price"""
        if self.original_price is not None and self.original_price < self.price:
            raise ValueError('Original price cannot be lower than the sale price')
        return self


class ProductCreate(ProductBase):
    """Schema for creating a product"""
    pass


class ProductUpdate(ProductBase):
    """
    Schema for updating a product (PUT)

    Omitted optional fields keep their current value.
    """
    stock: Optional[int] = Field(None, ge=0)
    sort: Optional[int] = Field(None, ge=0)
    status: Optional[Literal[0, 1]] = None


class ProductStatusUpdate(BaseModel):
    status: Literal[0, 1]


class ProductStockUpdate(BaseModel):
    """set replaces the stock, add increases it, reduce lowers it (never below 0)"""
    quantity: int = Field(..., ge=0)
    operation: Literal["set", "add", "reduce"] = "set"


class RecommendFlags(BaseModel):
    is_recommended: Optional[bool] = None
    is_hot: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_new: Optional[bool] = None


class ProductIds(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class BatchStatusUpdate(ProductIds):
    status: Literal[0, 1]


class BatchCategoryUpdate(ProductIds):
    category_id: int


class BatchPriceAdjust(ProductIds):
    """fixed sets every price to the value; percentage scales it by (1 + value/100)"""
    adjust_type: Literal["fixed", "percentage"]
    adjust_value: Decimal = Field(..., ge=0)


class BatchRecommendUpdate(ProductIds, RecommendFlags):
    pass


class ProductResponse(BaseModel):
    """Schema for API responses"""
    id: int
    name: str
    category_id: int
    category_name: str = ""
    sku: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    cost: Optional[float] = None
    stock: int
    sales: int
    description: Optional[str] = None
    images: List[str] = []
    primary_image: Optional[str] = None
    tags: List[str] = []
    specifications: Dict[str, Any] = {}
    seo_title: Optional[str] = None
    seo_keywords: Optional[str] = None
    seo_description: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Dict[str, Any] = {}
    brand: Optional[str] = None
    model: Optional[str] = None
    status: int
    sort: int
    is_recommended: bool
    is_hot: bool
    is_featured: bool
    is_new: bool
    profit_margin: float = 0
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductDetailResponse(ProductResponse):
    """Detail view with the category names from the root down"""
    category_path: List[str] = []
