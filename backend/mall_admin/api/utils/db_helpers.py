"""
Database Helpers - shared lookups and checks used by every route
"""
from typing import Type, TypeVar, Optional, Any
from sqlalchemy.orm import Session
from mall_admin.core.exceptions import NotFound, ValidationFailed

T = TypeVar('T')


def get_by_id(
    db: Session,
    model: Type[T],
    entity_id: int,
    raise_not_found: bool = True,
    error_message: str = None,
    options: list = None
) -> Optional[T]:
    """
    Fetch an entity by id.

    Args:
        db: Database session
        model: SQLAlchemy model class
        entity_id: Entity id
        raise_not_found: If True, raise NotFound (404) when missing
        error_message: Custom error message (optional)
        options: List of loader options (optional)

    Returns:
        The entity or None

    Raises:
        NotFound if raise_not_found=True and the entity does not exist

    Usage:
        product = get_by_id(db, Product, product_id)
        product = get_by_id(db, Product, product_id, options=[joinedload(Product.category)])
    """
    query = db.query(model).filter(model.id == entity_id)

    if options:
        for opt in options:
            query = query.options(opt)

    entity = query.first()

    if not entity and raise_not_found:
        msg = error_message or f"{model.__name__} not found"
        raise NotFound(msg)

    return entity


def validate_fk(
    db: Session,
    model: Type[T],
    fk_id: int,
    field_name: str = None,
    **filters
) -> T:
    """
    Check that a referenced row exists.

    A missing reference is a bad request, not a missing resource,
    so this raises ValidationFailed (400).

    Args:
        db: Database session
        model: Referenced model
        fk_id: Referenced id
        field_name: Name used in the error message (optional)
        **filters: Extra equality filters, e.g. status=1

    Returns:
        The referenced entity

    Usage:
        category = validate_fk(db, Category, category_id, "Category", status=1)
    """
    query = db.query(model).filter(model.id == fk_id)
    for column, value in filters.items():
        query = query.filter(getattr(model, column) == value)

    entity = query.first()

    if not entity:
        name = field_name or model.__name__
        raise ValidationFailed(f"{name} does not exist")

    return entity


def validate_unique(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
    exclude_id: int = None,
    display_name: str = None,
    **scope
) -> None:
    """
    Check that no other row has the same value.

    Args:
        db: Database session
        model: Model class
        field_name: Column to check
        field_value: Value to check
        exclude_id: Id to ignore (for updates)
        display_name: Name used in the error message
        **scope: Extra equality filters limiting the uniqueness scope,
                 e.g. parent_id=None for sibling names

    Raises:
        ValidationFailed (400) if the value is taken

    Usage:
        validate_unique(db, Product, "sku", sku)
        validate_unique(db, Category, "name", name, exclude_id=category.id, parent_id=parent_id)
    """
    field = getattr(model, field_name)
    query = db.query(model).filter(field == field_value)

    for column, value in scope.items():
        attr = getattr(model, column)
        query = query.filter(attr.is_(None) if value is None else attr == value)

    if exclude_id:
        query = query.filter(model.id != exclude_id)

    if query.first():
        name = display_name or field_name
        raise ValidationFailed(f"{name} already exists")
