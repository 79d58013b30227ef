from pydantic import BaseModel, Field, StringConstraints, field_validator
from typing import Annotated, Optional, List
from datetime import datetime

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


# ============ ROLES ============

def _unique_codes(codes):
    """Drop blanks and duplicates, keep order"""
    if codes is None:
        return None
    seen = []
    for code in codes:
        code = code.strip()
        if code and code not in seen:
            seen.append(code)
    return seen


class RoleBase(BaseModel):
    name: Name
    description: Optional[str] = Field(None, max_length=200)
    permissions: List[str] = []

    @field_validator("permissions")
    @classmethod
    def unique_codes(cls, v):
        return _unique_codes(v)


class RoleCreate(RoleBase):
    is_system: bool = False


class RoleUpdate(BaseModel):
    name: Optional[Name] = None
    description: Optional[str] = Field(None, max_length=200)
    permissions: Optional[List[str]] = None

    @field_validator("permissions")
    @classmethod
    def unique_codes(cls, v):
        return _unique_codes(v)


class RoleResponse(RoleBase):
    id: int
    is_system: bool

    class Config:
        from_attributes = True


# ============ PERMISSIONS ============

class PermissionBase(BaseModel):
    name: Name
    code: Name = Field(..., description="Permission code, e.g. product:write")
    description: Optional[str] = Field(None, max_length=200)


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseModel):
    name: Optional[Name] = None
    code: Optional[Name] = None
    description: Optional[str] = Field(None, max_length=200)


class PermissionResponse(PermissionBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


# ============ RESOURCES ============

class ResourceBase(BaseModel):
    name: Name
    type: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]
    url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    description: Optional[str] = Field(None, max_length=200)


class ResourceCreate(ResourceBase):
    pass


class ResourceUpdate(BaseModel):
    name: Optional[Name] = None
    type: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]] = None
    url: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]] = None
    description: Optional[str] = Field(None, max_length=200)


class ResourceResponse(ResourceBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
