# visitor_register/dependencies.py
"""
FastAPI dependencies shared by the routers: DB session, settings, and the
bearer-token guard chain (identity → role check).
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from visitor_register.config import Settings
from visitor_register.models.user_account import UserRole
from visitor_register.schemas.auth import Identity
from visitor_register.services.auth_service import require_role, verify_access_token

# auto_error=False so a missing header becomes our MissingCredentialsError (401), not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    """FastAPI dependency: yields a DB session and closes it after request."""
    with request.app.state.database.session() as db:
        yield db


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity:
    token = credentials.credentials if credentials else None
    return verify_access_token(token, settings.JWT_SECRET)


def require_roles(*roles: UserRole):
    """Build a dependency that passes only callers holding one of `roles`."""

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        require_role(identity, roles)
        return identity

    return checker


require_staff = require_roles(UserRole.admin, UserRole.staff)
require_admin = require_roles(UserRole.admin)
