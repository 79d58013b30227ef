from pydantic import BaseModel, EmailStr, Field, StringConstraints
from typing import Annotated, Optional, List, Literal
from datetime import datetime

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=20)]


class UserBase(BaseModel):
    """Base schema for AdminUser"""
    username: Username
    nickname: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = Field(None, max_length=500)
    role: str = Field("admin", max_length=50)


class UserCreate(UserBase):
    """Schema for creating an admin user"""
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    """Schema for updating an admin user (all fields optional)"""
    nickname: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = Field(None, max_length=500)
    role: Optional[str] = Field(None, max_length=50)
    status: Optional[Literal[0, 1]] = None
    password: Optional[str] = Field(None, min_length=6)


class UserResponse(UserBase):
    """Response schema for AdminUser (never includes the password)"""
    id: int
    status: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    """Schema for login"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Token plus the profile the admin UI needs after login"""
    token: str
    token_type: str = "bearer"
    user: UserResponse
    permissions: List[str]
    roles: List[str]


class CurrentUserResponse(UserResponse):
    permissions: List[str] = []
