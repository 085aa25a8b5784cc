from pydantic import BaseModel, field_validator, Field
from datetime import datetime
from typing import Optional

from models.user import UserRole


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError('Invalid email address')
    return v


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    role: UserRole = UserRole.USER
    access_code: Optional[str] = Field(None, max_length=100)

    @field_validator('email')
    @classmethod
    def email_valid(cls, v):
        return _normalize_email(v)


class UserCreate(UserBase):
    id: Optional[int] = Field(None, description="ID из сервиса авторизации")
    password_hash: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    access_code: Optional[str] = Field(None, max_length=100)

    @field_validator('email')
    @classmethod
    def email_valid(cls, v):
        if v is None:
            return v
        return _normalize_email(v)


class AccessCodeUpdate(BaseModel):
    access_code: Optional[str] = Field(None, max_length=100)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    access_code: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
