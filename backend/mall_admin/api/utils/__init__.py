# API Utilities - DRY Helpers
from mall_admin.api.utils.db_helpers import get_by_id, validate_fk, validate_unique
from mall_admin.api.utils.pagination import (
    paginate_query, resolve_order, apply_search_filter, apply_filters, MAX_PAGE_SIZE
)
from mall_admin.api.utils.updates import update_entity
from mall_admin.api.utils.responses import ok, ok_page, error_body

__all__ = [
    # db_helpers
    "get_by_id",
    "validate_fk",
    "validate_unique",
    # pagination
    "paginate_query",
    "resolve_order",
    "apply_search_filter",
    "apply_filters",
    "MAX_PAGE_SIZE",
    # updates
    "update_entity",
    # responses
    "ok",
    "ok_page",
    "error_body",
]
