from pydantic import BaseModel, Field, StringConstraints
from typing import Annotated, Optional, List, Literal
from datetime import datetime

CategoryName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class CategoryBase(BaseModel):
    """Base schema for Category"""
    name: CategoryName = Field(..., description="Category name, unique among siblings")
    parent_id: Optional[int] = Field(None, description="Parent category id (null for a top level category)")
    description: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=100)
    sort: int = Field(0, ge=0, description="Ascending display order among siblings")


class CategoryCreate(CategoryBase):
    """Schema for creating a category"""
    pass


class CategoryUpdate(CategoryBase):
    """
    Schema for updating a category (PUT replaces the editable fields)

    sort and status keep their current value when omitted.
    """
    sort: Optional[int] = Field(None, ge=0)
    status: Optional[Literal[0, 1]] = None


class CategoryStatusUpdate(BaseModel):
    status: Literal[0, 1]


class CategoryResponse(BaseModel):
    """Schema for API responses"""
    id: int
    name: str
    parent_id: Optional[int] = None
    parent_name: Optional[str] = None
    sort: int
    status: int
    description: Optional[str] = None
    icon: Optional[str] = None
    level: int
    path: str
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CategoryDetailResponse(CategoryResponse):
    """Detail view with the names along the path, root first"""
    path_names: List[str] = []


class CategoryTreeNode(CategoryResponse):
    children: List["CategoryTreeNode"] = []


class CategoryOption(BaseModel):
    """Dropdown entry; label is indented by depth"""
    value: int
    label: str
    level: int
