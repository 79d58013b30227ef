"""
Response Helpers - the {code, message, success, data} envelope
"""
from typing import Any, List


def ok(data: Any = None, message: str = "OK", code: int = 200) -> dict:
    """
    Success envelope.

    Usage:
        return ok(CategoryResponse.model_validate(category), "Category created")
    """
    return {"code": code, "message": message, "success": True, "data": data}


def ok_page(items: List[Any], total: int, page: int, size: int, message: str = "OK") -> dict:
    """
    Paginated success envelope: data = {list, total, page, size}.
    """
    return ok({"list": items, "total": total, "page": page, "size": size}, message)


def error_body(message: str, code: int) -> dict:
    """Failure envelope rendered by the exception handlers."""
    return {"code": code, "message": message, "success": False, "data": None}
