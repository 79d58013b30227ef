"""
Category hierarchy maintenance

Every write goes through here so level/path stay consistent with parent_id:
checks run first, and rows are only touched once every check has passed,
so a rejected operation leaves the session clean.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from mall_admin.config import settings
from mall_admin.api.utils import validate_fk, validate_unique
from mall_admin.core.exceptions import CategoryHierarchyError, ValidationFailed
from mall_admin.models.category import Category, CategoryStatus
from mall_admin.models.product import Product
from mall_admin.schemas.category import CategoryCreate, CategoryUpdate
from mall_admin.services import category_tree
from mall_admin.services.category_tree import TreeNode

logger = logging.getLogger(__name__)


def ensure_unique_sibling(db: Session, name: str, parent_id: Optional[int], exclude_id: Optional[int] = None) -> None:
    """Reject a name already used by another category under the same parent"""
    try:
        validate_unique(db, Category, "name", name, exclude_id=exclude_id, parent_id=parent_id)
    except ValidationFailed:
        raise CategoryHierarchyError("A category with this name already exists at this level") from None


def get_descendants(db: Session, category: Category) -> List[Category]:
    """Every category below ``category``, found by path prefix"""
    prefix = category_tree.descendant_prefix(category)
    return db.query(Category).filter(
        or_(Category.path == prefix, Category.path.like(f"{prefix}/%"))
    ).all()


def _load_parent(db: Session, parent_id: Optional[int]) -> Optional[Category]:
    if parent_id is None:
        return None
    return validate_fk(db, Category, parent_id, "Parent category")


def create_category(db: Session, data: CategoryCreate, operator: Optional[str] = None) -> Category:
    """
    Create a category under ``data.parent_id`` (root when None).

    Raises:
        ValidationFailed: parent missing, tree too deep or duplicate sibling name
    """
    operator = operator or settings.DEFAULT_OPERATOR
    parent = _load_parent(db, data.parent_id)
    placement = category_tree.check_parent(None, parent)
    ensure_unique_sibling(db, data.name, placement.parent_id)

    category = Category(
        name=data.name,
        description=data.description.strip() if data.description else "",
        icon=data.icon.strip() if data.icon else "",
        sort=data.sort,
        parent_id=placement.parent_id,
        level=placement.level,
        path=placement.path,
        created_by=operator,
        updated_by=operator,
    )
    db.add(category)
    db.commit()
    db.refresh(category)

    logger.info("Category %s created at level %s (path=%r)", category.id, category.level, category.path)
    return category


def update_category(db: Session, category: Category, data: CategoryUpdate, operator: Optional[str] = None) -> Category:
    """
    Replace the editable fields of ``category``.

    Moving the category to another parent re-checks cycle and depth for the
    whole subtree, then rebases the path and shifts the level of every
    descendant in the same commit.
    """
    operator = operator or settings.DEFAULT_OPERATOR
    new_parent_id = data.parent_id
    parent_changed = new_parent_id != category.parent_id
    placement = None
    descendants: List[Category] = []

    if parent_changed:
        if new_parent_id is not None and new_parent_id == category.id:
            raise CategoryHierarchyError("A category cannot be its own parent")
        parent = _load_parent(db, new_parent_id)
        descendants = get_descendants(db, category)
        height = category_tree.subtree_height(category, descendants)
        placement = category_tree.check_parent(category.id, parent, height)

    if parent_changed or data.name != category.name:
        ensure_unique_sibling(db, data.name, new_parent_id, exclude_id=category.id)

    # All checks passed; from here on the rows are modified
    category.name = data.name
    category.description = data.description.strip() if data.description else ""
    category.icon = data.icon.strip() if data.icon else ""
    if data.sort is not None:
        category.sort = data.sort
    if data.status is not None:
        category.status = data.status
    category.updated_by = operator

    if placement is not None:
        old_prefix = category_tree.descendant_prefix(category)
        level_shift = placement.level - category.level

        category.parent_id = placement.parent_id
        category.level = placement.level
        category.path = placement.path

        new_prefix = category_tree.descendant_prefix(category)
        for descendant in descendants:
            descendant.path = category_tree.rebase_path(descendant.path, old_prefix, new_prefix)
            descendant.level += level_shift
            descendant.updated_by = operator

        logger.info(
            "Category %s moved under %s, %d descendant(s) rebased",
            category.id, placement.parent_id, len(descendants)
        )

    db.commit()
    db.refresh(category)
    return category


def update_status(db: Session, category: Category, status: int, operator: Optional[str] = None) -> Category:
    operator = operator or settings.DEFAULT_OPERATOR
    if status not in (CategoryStatus.DISABLED, CategoryStatus.ENABLED):
        raise ValidationFailed("Invalid status value")
    category.status = status
    category.updated_by = operator
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category) -> None:
    """
    Hard delete a leaf category.

    Raises:
        CategoryHierarchyError: the category still has children
        ValidationFailed: products still reference the category
    """
    child_count = db.query(Category).filter(Category.parent_id == category.id).count()
    if child_count > 0:
        raise CategoryHierarchyError("This category still has subcategories and cannot be deleted")

    product_count = db.query(Product).filter(Product.category_id == category.id).count()
    if product_count > 0:
        raise ValidationFailed("This category still has products and cannot be deleted")

    db.delete(category)
    db.commit()
    logger.info("Category %s deleted", category.id)


def path_names(db: Session, category: Category) -> List[str]:
    """Names from the root down to ``category`` itself"""
    ids = category_tree.ancestor_ids(category.path)
    if not ids:
        return [category.name]
    ancestors = db.query(Category).filter(Category.id.in_(ids)).order_by(Category.level).all()
    return [c.name for c in ancestors] + [category.name]


def get_tree(db: Session, status: Optional[int] = None) -> List[TreeNode]:
    """
    Category forest.

    With a status filter, a filtered-out category hides its whole subtree.
    """
    query = db.query(Category)
    if status is not None:
        query = query.filter(Category.status == status)
    return category_tree.build_tree(query.all())


def get_options(db: Session, status: int = CategoryStatus.ENABLED, max_level: Optional[int] = None) -> List[dict]:
    """Flat, indented option list for category pickers"""
    query = db.query(Category).filter(Category.status == status)
    if max_level is not None:
        query = query.filter(Category.level <= max_level)
    return category_tree.flatten_options(category_tree.build_tree(query.all()))
