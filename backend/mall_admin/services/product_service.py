"""
Product rules that go beyond a single column update

SKU generation, price normalization, stock operations and the batch
operations of the product list page.
"""
import logging
import random
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from mall_admin.api.utils import validate_fk
from mall_admin.config import settings
from mall_admin.core.exceptions import ValidationFailed
from mall_admin.models.category import Category, CategoryStatus
from mall_admin.models.product import Product, ProductStatus
from mall_admin.schemas.product import ProductCreate, ProductUpdate, RecommendFlags
from mall_admin.services import category_service

logger = logging.getLogger(__name__)

SKU_PREFIX = "P"
SKU_MAX_ATTEMPTS = 10
CENT = Decimal("0.01")
PRICE_FIELDS = ("price", "original_price", "cost", "weight")
RECOMMEND_FIELDS = ("is_recommended", "is_hot", "is_featured", "is_new")


def quantize(value: Optional[Decimal]) -> Optional[Decimal]:
    """Round a money value to two decimals (half up)"""
    if value is None:
        return None
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sku_exists(db: Session, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def generate_sku(db: Session, today: Optional[datetime] = None) -> str:
    """
    P + YYYYMMDD + 4 random digits

    Regenerated on collision, giving up after SKU_MAX_ATTEMPTS.
    """
    date_part = (today or datetime.now()).strftime("%Y%m%d")
    for _ in range(SKU_MAX_ATTEMPTS):
        sku = f"{SKU_PREFIX}{date_part}{random.randint(0, 9999):04d}"
        if not sku_exists(db, sku):
            return sku
    raise ValidationFailed("Could not generate a unique SKU, please provide one")


def get_enabled_category(db: Session, category_id: int) -> Category:
    """Products may only be attached to an existing, enabled category"""
    return validate_fk(db, Category, category_id, "Enabled category", status=CategoryStatus.ENABLED)


def _check_prices(product_id, price, original_price, cost) -> None:
    if original_price is not None and price is not None and original_price < price:
        raise ValidationFailed("Original price cannot be lower than the sale price")
    if cost is not None and price is not None and cost > price:
        logger.warning("Product %s: cost %s is above the sale price %s", product_id or "(new)", cost, price)


def create_product(db: Session, data: ProductCreate, operator: Optional[str] = None) -> Product:
    operator = operator or settings.DEFAULT_OPERATOR
    get_enabled_category(db, data.category_id)

    values = data.model_dump()
    for field in PRICE_FIELDS:
        values[field] = quantize(values[field])

    if values["sku"]:
        if sku_exists(db, values["sku"]):
            raise ValidationFailed("SKU already exists")
    else:
        values["sku"] = generate_sku(db)

    _check_prices(None, values["price"], values["original_price"], values["cost"])

    product = Product(**values, created_by=operator, updated_by=operator)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("Product %s created (sku=%s)", product.id, product.sku)
    return product


def update_product(db: Session, product: Product, data: ProductUpdate, operator: Optional[str] = None) -> Product:
    """
    Apply a full update

    Optional fields that were not sent keep their stored value; a blank SKU
    keeps the current one.
    """
    operator = operator or settings.DEFAULT_OPERATOR
    values = data.model_dump(exclude_unset=True)

    if values.get("sku") is None:
        values.pop("sku", None)
    elif values["sku"] != product.sku and sku_exists(db, values["sku"], exclude_id=product.id):
        raise ValidationFailed("SKU already exists")

    if "category_id" in values and values["category_id"] != product.category_id:
        get_enabled_category(db, values["category_id"])

    for field in PRICE_FIELDS:
        if field in values:
            values[field] = quantize(values[field])

    _check_prices(
        product.id,
        values.get("price", product.price),
        values.get("original_price", product.original_price),
        values.get("cost", product.cost),
    )

    for field, value in values.items():
        setattr(product, field, value)
    product.updated_by = operator

    db.commit()
    db.refresh(product)
    return product


def update_stock(db: Session, product: Product, quantity: int, operation: str, operator: str) -> Product:
    """set replaces, add increases, reduce decreases without going below zero"""
    if operation == "set":
        product.stock = quantity
    elif operation == "add":
        product.stock = product.stock + quantity
    elif operation == "reduce":
        product.stock = max(0, product.stock - quantity)
    else:
        raise ValidationFailed(f"Unknown stock operation: {operation}")

    product.updated_by = operator
    db.commit()
    db.refresh(product)
    return product


def _apply_flags(product: Product, flags: RecommendFlags) -> bool:
    changed = False
    for field in RECOMMEND_FIELDS:
        value = getattr(flags, field)
        if value is not None:
            setattr(product, field, value)
            changed = True
    return changed


def update_recommend(db: Session, product: Product, flags: RecommendFlags, operator: str) -> Product:
    if not _apply_flags(product, flags):
        raise ValidationFailed("No recommendation flag provided")
    product.updated_by = operator
    db.commit()
    db.refresh(product)
    return product


def category_path(db: Session, product: Product) -> List[str]:
    """Category names from the root down to the product's category"""
    if not product.category:
        return []
    return category_service.path_names(db, product.category)


# ============ LISTS ============

def _on_shelf(db: Session, category_id: Optional[int]):
    query = db.query(Product).filter(Product.status == ProductStatus.ON_SHELF)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    return query


def top_selling(db: Session, limit: int = 10, category_id: Optional[int] = None) -> List[Product]:
    return _on_shelf(db, category_id).order_by(
        Product.sales.desc(), Product.id.desc()
    ).limit(limit).all()


def newest(db: Session, limit: int = 10, category_id: Optional[int] = None) -> List[Product]:
    return _on_shelf(db, category_id).order_by(
        Product.created_at.desc(), Product.id.desc()
    ).limit(limit).all()


def related(db: Session, product: Product, limit: int = 6) -> List[Product]:
    """On-shelf products of the same category, best sellers first"""
    return db.query(Product).filter(
        Product.category_id == product.category_id,
        Product.status == ProductStatus.ON_SHELF,
        Product.id != product.id
    ).order_by(Product.sales.desc(), Product.id.desc()).limit(limit).all()


# ============ BATCH ============

def _load_many(db: Session, ids: List[int]) -> List[Product]:
    return db.query(Product).filter(Product.id.in_(set(ids))).all()


def batch_update_status(db: Session, ids: List[int], status: int, operator: str) -> Tuple[int, int]:
    """Returns (modified_count, total_count)"""
    products = _load_many(db, ids)
    modified = 0
    for product in products:
        if product.status != status:
            product.status = status
            product.updated_by = operator
            modified += 1
    db.commit()
    return modified, len(products)


def batch_update_category(db: Session, ids: List[int], category_id: int, operator: str) -> Tuple[int, int]:
    get_enabled_category(db, category_id)
    products = _load_many(db, ids)
    modified = 0
    for product in products:
        if product.category_id != category_id:
            product.category_id = category_id
            product.updated_by = operator
            modified += 1
    db.commit()
    return modified, len(products)


def adjusted_price(price: Decimal, adjust_type: str, adjust_value: Decimal) -> Decimal:
    if adjust_type == "fixed":
        return quantize(adjust_value)
    if adjust_type == "percentage":
        return quantize(Decimal(price) * (1 + Decimal(adjust_value) / 100))
    raise ValidationFailed(f"Unknown price adjustment: {adjust_type}")


def batch_adjust_price(
    db: Session, ids: List[int], adjust_type: str, adjust_value: Decimal, operator: str
) -> Tuple[int, int]:
    """
    Reprice several products at once

    A product whose new price would not be positive is left untouched.
    """
    products = _load_many(db, ids)
    modified = 0
    for product in products:
        new_price = adjusted_price(product.price, adjust_type, adjust_value)
        if new_price <= 0:
            logger.info("Product %s skipped: adjusted price %s is not positive", product.id, new_price)
            continue
        product.price = new_price
        product.updated_by = operator
        modified += 1
    db.commit()
    return modified, len(products)


def batch_update_recommend(db: Session, ids: List[int], flags: RecommendFlags, operator: str) -> Tuple[int, int]:
    products = _load_many(db, ids)
    modified = 0
    for product in products:
        if _apply_flags(product, flags):
            product.updated_by = operator
            modified += 1
    db.commit()
    return modified, len(products)


def batch_delete(db: Session, ids: List[int]) -> int:
    products = _load_many(db, ids)
    for product in products:
        db.delete(product)
    db.commit()
    logger.info("%d product(s) deleted", len(products))
    return len(products)
