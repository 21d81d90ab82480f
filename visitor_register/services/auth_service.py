# visitor_register/services/auth_service.py
"""
Login, bearer token issuance/verification and role checks.

Tokens are HS256 JWTs carrying {id, username, role}. Verification only
checks signature and expiry; it does not look the account up again, so a
token stays valid until it expires even if its account is deleted.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from visitor_register.exceptions import ForbiddenError, InvalidCredentialsError, MissingCredentialsError
from visitor_register.models.user_account import UserAccount, UserRole
from visitor_register.schemas.auth import Identity
from visitor_register.utils.clock import utcnow
from visitor_register.utils.logger import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"

# Verified against for unknown usernames; both login failures hash once
DUMMY_PASSWORD_HASH = generate_password_hash("no-such-account")


def create_access_token(
    identity: Identity,
    secret: str,
    expires_minutes: int = 60,
    now: Optional[datetime] = None,
) -> str:
    issued_at = now or utcnow()
    payload = {
        "sub": identity.id,
        "id": identity.id,
        "username": identity.username,
        "role": identity.role.value,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_access_token(token: Optional[str], secret: str) -> Identity:
    """Return the identity inside a valid token. Never extends its lifetime."""
    if not token:
        raise MissingCredentialsError()
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidCredentialsError(INVALID_TOKEN_MESSAGE)

    if payload.get("type") != TOKEN_TYPE:
        raise InvalidCredentialsError(INVALID_TOKEN_MESSAGE)
    try:
        return Identity(id=payload["id"], username=payload["username"], role=payload["role"])
    except (KeyError, ValueError):
        raise InvalidCredentialsError(INVALID_TOKEN_MESSAGE)


def authenticate(
    db: Session,
    username: str,
    password: str,
    secret: str,
    expires_minutes: int = 60,
) -> tuple[str, Identity]:
    """
    Check a username/password pair and issue a token.
    Unknown usernames and wrong passwords fail with the same error.
    """
    account = db.query(UserAccount).filter(UserAccount.username == username).first()
    password_hash = account.password_hash if account is not None else DUMMY_PASSWORD_HASH
    if not check_password_hash(password_hash, password) or account is None:
        logger.warning(f"[AUTH] Failed login for username '{username}'")
        raise InvalidCredentialsError()

    identity = Identity(id=account.id, username=account.username, role=account.role)
    token = create_access_token(identity, secret, expires_minutes)
    logger.info(f"[AUTH] {account.username} logged in ({account.role.value})")
    return token, identity


def require_role(identity: Identity, allowed_roles: Iterable[UserRole]) -> None:
    if identity.role not in set(allowed_roles):
        raise ForbiddenError()
