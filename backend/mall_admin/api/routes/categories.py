"""
Category routes

Reads are public; writes need category:write. Hierarchy rules live in
services.category_service.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional, List, Literal
from mall_admin.api.deps import get_db, get_client_ip, require_permission
from mall_admin.core.exceptions import ValidationFailed
from mall_admin.models.category import Category
from mall_admin.models.user import AdminUser
from mall_admin.schemas.common import Envelope, Page
from mall_admin.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryStatusUpdate,
    CategoryResponse,
    CategoryDetailResponse,
    CategoryTreeNode,
    CategoryOption
)
from mall_admin.services import category_service
from mall_admin.services.audit import write_log
from mall_admin.services.category_tree import MAX_LEVEL, TreeNode
from mall_admin.api.utils import (
    get_by_id, paginate_query, resolve_order, apply_search_filter, apply_filters,
    ok, ok_page, MAX_PAGE_SIZE
)

router = APIRouter()

SORT_COLUMNS = {
    "sort": Category.sort,
    "createTime": Category.created_at,
    "updateTime": Category.updated_at,
    "name": Category.name,
    "level": Category.level,
}


def _parse_parent_filter(parent_id: Optional[str]):
    """'null' or empty selects the roots; anything else must be an id"""
    if parent_id is None:
        return False, None
    if parent_id.strip().lower() in ("", "null"):
        return True, None
    try:
        return True, int(parent_id)
    except ValueError:
        raise ValidationFailed("parent_id must be an integer or 'null'") from None


def _to_tree_node(node: TreeNode) -> CategoryTreeNode:
    data = CategoryResponse.model_validate(node.item).model_dump()
    return CategoryTreeNode(**data, children=[_to_tree_node(child) for child in node.children])


def _log(db: Session, request: Request, user: AdminUser, operation: str, detail: str):
    write_log(db, user_id=user.id, operation=operation, target="categories",
              detail=detail, ip=get_client_ip(request))


@router.get("/", response_model=Envelope[Page[CategoryResponse]])
def list_categories(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    keyword: Optional[str] = Query(None, description="Search name or description"),
    status: Optional[int] = Query(None, ge=0, le=1),
    parent_id: Optional[str] = Query(None, description="Parent id, or 'null' for top level categories"),
    level: Optional[int] = Query(None, ge=0, le=MAX_LEVEL),
    order_by: str = Query("sort"),
    order: Literal["asc", "desc"] = Query("asc"),
    db: Session = Depends(get_db)
):
    """List categories with paging and filters"""
    query = db.query(Category)

    query = apply_search_filter(query, keyword, Category.name, Category.description)
    query = apply_filters(query, [
        (status, Category.status, "eq"),
        (level, Category.level, "eq"),
    ])

    filter_parent, parent_value = _parse_parent_filter(parent_id)
    if filter_parent:
        if parent_value is None:
            query = query.filter(Category.parent_id.is_(None))
        else:
            query = query.filter(Category.parent_id == parent_value)

    ordering = resolve_order(SORT_COLUMNS, order_by, order, "sort", Category.created_at.desc(), Category.id)
    items, total = paginate_query(query, page, size, ordering)
    return ok_page([CategoryResponse.model_validate(c) for c in items], total, page, size)


@router.get("/tree", response_model=Envelope[List[CategoryTreeNode]])
def category_tree(
    status: Optional[int] = Query(None, ge=0, le=1),
    db: Session = Depends(get_db)
):
    """Nested category tree"""
    roots = category_service.get_tree(db, status)
    return ok([_to_tree_node(root) for root in roots])


@router.get("/options", response_model=Envelope[List[CategoryOption]])
def category_options(
    status: int = Query(1, ge=0, le=1),
    max_level: Optional[int] = Query(None, ge=0, le=MAX_LEVEL),
    db: Session = Depends(get_db)
):
    """Flat option list for pickers, labels indented by depth"""
    return ok(category_service.get_options(db, status, max_level))


@router.get("/{category_id}", response_model=Envelope[CategoryDetailResponse])
def get_category(
    category_id: int,
    db: Session = Depends(get_db)
):
    """Category detail with the names along its path"""
    category = get_by_id(db, Category, category_id, error_message="Category not found")
    detail = CategoryDetailResponse.model_validate(category)
    detail.path_names = category_service.path_names(db, category)
    return ok(detail)


@router.post("/", response_model=Envelope[CategoryResponse], status_code=201)
def create_category(
    data: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("category:write"))
):
    """Create a category"""
    category = category_service.create_category(db, data, user.username)
    _log(db, request, user, "CREATE", f"Created category {category.id} {category.name}")
    return ok(CategoryResponse.model_validate(category), "Category created", 201)


@router.put("/{category_id}", response_model=Envelope[CategoryResponse])
def update_category(
    category_id: int,
    data: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("category:write"))
):
    """Update a category, moving its subtree when the parent changes"""
    category = get_by_id(db, Category, category_id, error_message="Category not found")
    category = category_service.update_category(db, category, data, user.username)
    _log(db, request, user, "UPDATE", f"Updated category {category.id} {category.name}")
    return ok(CategoryResponse.model_validate(category), "Category updated")


@router.patch("/{category_id}/status", response_model=Envelope[CategoryResponse])
def update_category_status(
    category_id: int,
    data: CategoryStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("category:write"))
):
    """Enable or disable a category"""
    category = get_by_id(db, Category, category_id, error_message="Category not found")
    category = category_service.update_status(db, category, data.status, user.username)
    _log(db, request, user, "UPDATE", f"Set category {category.id} status to {category.status}")
    return ok(CategoryResponse.model_validate(category), "Status updated")


@router.delete("/{category_id}", response_model=Envelope[None])
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: AdminUser = Depends(require_permission("category:write"))
):
    """Delete a category without children or products"""
    category = get_by_id(db, Category, category_id, error_message="Category not found")
    name = category.name
    category_service.delete_category(db, category)
    _log(db, request, user, "DELETE", f"Deleted category {category_id} {name}")
    return ok(None, "Category deleted")
