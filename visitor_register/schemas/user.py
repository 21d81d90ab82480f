# visitor_register/schemas/user.py
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Optional

from visitor_register.models.user_account import UserRole
from visitor_register.utils.clock import as_utc

MIN_PASSWORD_LENGTH = 6
USERNAME_MAX_LENGTH = 150


def _check_username(value):
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("username", "Username is required.")
    value = value.strip()
    if len(value) > USERNAME_MAX_LENGTH:
        raise PydanticCustomError(
            "username", "Username must be at most {max_length} characters.", {"max_length": USERNAME_MAX_LENGTH},
        )
    return value


def _check_password(value):
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        raise PydanticCustomError(
            "password", "Password must be at least {min_length} characters long.",
            {"min_length": MIN_PASSWORD_LENGTH},
        )
    return value


def _check_role(value):
    if isinstance(value, UserRole):
        return value
    if value not in ("admin", "staff"):
        raise PydanticCustomError("role", "Role must be 'admin' or 'staff'.")
    return UserRole(value)


class UserCreate(BaseModel):
    username: str
    password: str
    role: UserRole

    @field_validator("username", mode="before")
    @classmethod
    def username_required(cls, value):
        return _check_username(value)

    @field_validator("password", mode="before")
    @classmethod
    def password_long_enough(cls, value):
        return _check_password(value)

    @field_validator("role", mode="before")
    @classmethod
    def role_known(cls, value):
        return _check_role(value)


class UserUpdate(BaseModel):
    """All fields optional; omitted or null fields are left unchanged."""

    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("username", mode="before")
    @classmethod
    def username_not_blank(cls, value):
        return None if value is None else _check_username(value)

    @field_validator("password", mode="before")
    @classmethod
    def password_long_enough(cls, value):
        return None if value is None else _check_password(value)

    @field_validator("role", mode="before")
    @classmethod
    def role_known(cls, value):
        return None if value is None else _check_role(value)

    def changes(self) -> dict:
        return {field: value for field, value in self.model_dump().items() if value is not None}


class UserOut(BaseModel):
    id: str
    username: str
    role: UserRole
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def in_utc(cls, value):
        return as_utc(value)

    class Config:
        from_attributes = True


class PaginationOut(BaseModel):
    total_users: int
    total_pages: int
    current_page: int
    per_page: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserListOut(BaseModel):
    users: list[UserOut]
    pagination: PaginationOut
