"""
Pagination Helpers - paging, ordering and filtering of list queries
"""
from typing import TypeVar, Any, Optional, Tuple, List
from sqlalchemy.orm import Query
from sqlalchemy import or_

T = TypeVar('T')

MAX_PAGE_SIZE = 100


def paginate_query(
    query: Query,
    page: int = 1,
    size: int = 20,
    order_by: Any = None
) -> Tuple[List[T], int]:
    """
    Apply paging to a query and return items + total.

    Args:
        query: SQLAlchemy query
        page: Page number (1-indexed)
        size: Page size
        order_by: Column(s) to order by - single or tuple

    Returns:
        Tuple (items, total)

    Usage:
        items, total = paginate_query(query, page=1, size=20, order_by=Product.name)
        items, total = paginate_query(query, 1, 20, order_by=(Product.sales.desc(), Product.id))
    """
    total = query.count()

    if order_by is not None:
        if isinstance(order_by, tuple):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    items = query.offset((page - 1) * size).limit(size).all()

    return items, total


def resolve_order(
    columns: dict,
    order_by: Optional[str],
    order: str,
    default: str,
    *tiebreakers
) -> tuple:
    """
    Map a client sort key to an ORDER BY tuple.

    Unknown keys fall back to ``default``; ``tiebreakers`` are appended as-is.

    Usage:
        ordering = resolve_order(SORT_COLUMNS, order_by, order, "sort", Category.created_at.desc())
    """
    column = columns.get(order_by or default, columns[default])
    primary = column.desc() if order == "desc" else column.asc()
    return (primary, *tiebreakers)


def apply_search_filter(
    query: Query,
    search_term: Optional[str],
    *fields
) -> Query:
    """
    Apply a case-insensitive LIKE filter over several columns.

    Usage:
        query = apply_search_filter(query, keyword, Product.name, Product.sku, Product.description)
    """
    if not search_term or not fields:
        return query

    conditions = [field.ilike(f"%{search_term}%") for field in fields]
    return query.filter(or_(*conditions))


def apply_filters(
    query: Query,
    filters: List[tuple]
) -> Query:
    """
    Apply several filters at once, skipping None values.

    Args:
        query: SQLAlchemy query
        filters: List of (value, column, operator)
                 operator: "eq", "like", "in", "gt", "lt", "gte", "lte"

    Usage:
        query = apply_filters(query, [
            (status, Product.status, "eq"),
            (min_price, Product.price, "gte"),
        ])
    """
    for value, field, operator in filters:
        if value is None:
            continue

        if operator == "eq":
            query = query.filter(field == value)
        elif operator == "like":
            query = query.filter(field.ilike(f"%{value}%"))
        elif operator == "in":
            query = query.filter(field.in_(value))
        elif operator == "gt":
            query = query.filter(field > value)
        elif operator == "lt":
            query = query.filter(field < value)
        elif operator == "gte":
            query = query.filter(field >= value)
        elif operator == "lte":
            query = query.filter(field <= value)
        else:
            raise ValueError(f"Unknown filter operator: {operator}")

    return query
