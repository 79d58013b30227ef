from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper returned by every endpoint"""
    code: int = 200
    message: str = "OK"
    success: bool = True
    data: Optional[T] = None


class Page(BaseModel, Generic[T]):
    """Paginated data carried inside an Envelope"""
    list: List[T]
    total: int
    page: int
    size: int


class BatchResult(BaseModel):
    """Outcome of a batch operation"""
    modified_count: int
    total_count: int
