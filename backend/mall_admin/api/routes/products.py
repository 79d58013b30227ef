"""
Product routes

Reads need any signed-in user; writes need product:write.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from typing import Optional, List, Literal
from mall_admin.api.deps import get_db, get_client_ip, get_current_user, require_permission
from mall_admin.models.product import Product
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page, BatchResult
from mall_admin.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductDetailResponse,
    ProductStatusUpdate,
    ProductStockUpdate,
    RecommendFlags,
    ProductIds,
    BatchStatusUpdate,
    BatchCategoryUpdate,
    BatchPriceAdjust,
    BatchRecommendUpdate
)
from mall_admin.services import product_service
from mall_admin.services.audit import write_log
from mall_admin.api.utils import (
    get_by_id, paginate_query, resolve_order, apply_search_filter, apply_filters,
    ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()

SORT_COLUMNS = {
    "createTime": Product.created_at,
    "updateTime": Product.updated_at,
    "name": Product.name,
    "price": Product.price,
    "sales": Product.sales,
    "stock": Product.stock,
    "sort": Product.sort,
}

WITH_CATEGORY = [joinedload(Product.category)]


def _get_product(db: Session, product_id: int) -> Product:
    return get_by_id(db, Product, product_id, error_message="Product not found", options=WITH_CATEGORY)


def _log(db: Session, request: Request, user: AdminUser, operation: str, detail: str):
    write_log(db, user_id=user.id, operation=operation, target="products",
              detail=detail, ip=get_client_ip(request))


def _responses(products: List[Product]) -> List[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/", response_model=Envelope[Page[ProductResponse]])
def list_products(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None, description="Search name, SKU, description, brand or model"),
    category_id: Optional[int] = Query(None),
    status: Optional[int] = Query(None, ge=0, le=1),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    brand: Optional[str] = Query(None),
    in_stock: Optional[bool] = Query(None, description="true: stock > 0, false: out of stock"),
    order_by: str = Query("createTime"),
    order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """List products with paging and filters"""
    query = db.query(Product).options(*WITH_CATEGORY)

    query = apply_search_filter(
        query, keyword,
        Product.name, Product.sku, Product.description, Product.brand, Product.model
    )
    query = apply_filters(query, [
        (category_id, Product.category_id, "eq"),
        (status, Product.status, "eq"),
        (min_price, Product.price, "gte"),
        (max_price, Product.price, "lte"),
        (brand, Product.brand, "like"),
    ])
    if in_stock is True:
        query = query.filter(Product.stock > 0)
    elif in_stock is False:
        query = query.filter(or_(Product.stock <= 0, Product.stock.is_(None)))

    ordering = resolve_order(SORT_COLUMNS, order_by, order, "createTime", Product.id.desc())
    items, total = paginate_query(query, page, size, ordering)
    return ok_page(_responses(items), total, page, size)


@router.get("/top-selling", response_model=Envelope[List[ProductResponse]])
def top_selling_products(
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """On-shelf products ordered by sales"""
    return ok(_responses(product_service.top_selling(db, limit, category_id)))


@router.get("/new", response_model=Envelope[List[ProductResponse]])
def new_products(
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """Most recently created on-shelf products"""
    return ok(_responses(product_service.newest(db, limit, category_id)))


@router.get("/{product_id}", response_model=Envelope[ProductDetailResponse])
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """Product detail with the category path"""
    product = _get_product(db, product_id)
    detail = ProductDetailResponse.model_validate(product)
    detail.category_path = product_service.category_path(db, product)
    return ok(detail)


@router.get("/{product_id}/related", response_model=Envelope[List[ProductResponse]])
def related_products(
    product_id: int,
    limit: int = Query(6, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    user: AdminUser = Depends(get_current_user)
):
    """Other on-shelf products of the same category"""
    product = _get_product(db, product_id)
    return ok(_responses(product_service.related(db, product, limit)))


@router.post("/", response_model=Envelope[ProductResponse], status_code=201)
def create_product(
    data: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Create a product (SKU generated when omitted)"""
    product = product_service.create_product(db, data, user.username)
    _log(db, request, user, "CREATE", f"Created product {product.id} {product.sku}")
    return ok(ProductResponse.model_validate(product), "Product created", 201)


@router.put("/{product_id}", response_model=Envelope[ProductResponse])
def update_product(
    product_id: int,
    data: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Update a product"""
    product = _get_product(db, product_id)
    product = product_service.update_product(db, product, data, user.username)
    _log(db, request, user, "UPDATE", f"Updated product {product.id} {product.sku}")
    return ok(ProductResponse.model_validate(product), "Product updated")


@router.patch("/{product_id}/status", response_model=Envelope[ProductResponse])
def update_product_status(
    product_id: int,
    data: ProductStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Put a product on or off the shelf"""
    product = _get_product(db, product_id)
    product.status = data.status
    product.updated_by = user.username
    db.commit()
    db.refresh(product)
    _log(db, request, user, "UPDATE", f"Set product {product.id} status to {product.status}")
    return ok(ProductResponse.model_validate(product), "Status updated")


@router.patch("/{product_id}/stock", response_model=Envelope[ProductResponse])
def update_product_stock(
    product_id: int,
    data: ProductStockUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Set, add to or reduce the stock"""
    product = _get_product(db, product_id)
    product = product_service.update_stock(db, product, data.quantity, data.operation, user.username)
    _log(db, request, user, "UPDATE",
         f"Stock of product {product.id}: {data.operation} {data.quantity}, now {product.stock}")
    return ok(ProductResponse.model_validate(product), "Stock updated")


@router.patch("/{product_id}/recommend", response_model=Envelope[ProductResponse])
def update_product_recommend(
    product_id: int,
    data: RecommendFlags,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Change the recommendation flags"""
    product = _get_product(db, product_id)
    product = product_service.update_recommend(db, product, data, user.username)
    _log(db, request, user, "UPDATE", f"Changed recommendation flags of product {product.id}")
    return ok(ProductResponse.model_validate(product), "Recommendation updated")


@router.delete("/{product_id}", response_model=Envelope[None])
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    """Delete a product"""
    product = _get_product(db, product_id)
    sku = product.sku
    db.delete(product)
    db.commit()
    _log(db, request, user, "DELETE", f"Deleted product {product_id} {sku}")
    return ok(None, "Product deleted")


# ============ BATCH ============

@router.post("/batch/status", response_model=Envelope[BatchResult])
def batch_status(
    data: BatchStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    modified, total = product_service.batch_update_status(db, data.ids, data.status, user.username)
    _log(db, request, user, "UPDATE", f"Batch set status {data.status} on {modified}/{total} product(s)")
    return ok(BatchResult(modified_count=modified, total_count=total), "Batch status updated")


@router.post("/batch/category", response_model=Envelope[BatchResult])
def batch_category(
    data: BatchCategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    modified, total = product_service.batch_update_category(db, data.ids, data.category_id, user.username)
    _log(db, request, user, "UPDATE", f"Batch moved {modified}/{total} product(s) to category {data.category_id}")
    return ok(BatchResult(modified_count=modified, total_count=total), "Batch category updated")


@router.post("/batch/price", response_model=Envelope[BatchResult])
def batch_price(
    data: BatchPriceAdjust,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    modified, total = product_service.batch_adjust_price(
        db, data.ids, data.adjust_type, data.adjust_value, user.username
    )
    _log(db, request, user, "UPDATE",
         f"Batch {data.adjust_type} price adjustment {data.adjust_value} on {modified}/{total} product(s)")
    return ok(BatchResult(modified_count=modified, total_count=total), "Batch price adjusted")


@router.post("/batch/recommend", response_model=Envelope[BatchResult])
def batch_recommend(
    data: BatchRecommendUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    modified, total = product_service.batch_update_recommend(db, data.ids, data, user.username)
    _log(db, request, user, "UPDATE", f"Batch changed recommendation flags of {modified}/{total} product(s)")
    return ok(BatchResult(modified_count=modified, total_count=total), "Batch recommendation updated")


@router.post("/batch/delete", response_model=Envelope[BatchResult])
def batch_delete(
    data: ProductIds,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("product:write"))
):
    deleted = product_service.batch_delete(db, data.ids)
    _log(db, request, user, "DELETE", f"Batch deleted {deleted} product(s)")
    return ok(BatchResult(modified_count=deleted, total_count=len(set(data.ids))), "Products deleted")
