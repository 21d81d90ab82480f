# visitor_register/schemas/auth.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from visitor_register.models.user_account import UserRole


class LoginRequest(BaseModel):
    username: str
    password: str


class Identity(BaseModel):
    """The authenticated caller, as carried inside the access token."""

    id: str
    username: str
    role: UserRole


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Identity

    class Config:
        alias_generator = to_camel
        populate_by_name = True
