# visitor_register/services/user_service.py
"""
Account management for admins, plus seeding the first admin on startup.
Passwords are always re-hashed here and never logged.
"""

import math
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from visitor_register.exceptions import ConfigurationError, ConflictError, NotFoundError, ValidationError
from visitor_register.models.user_account import UserAccount, UserRole
from visitor_register.schemas.auth import Identity
from visitor_register.schemas.user import MIN_PASSWORD_LENGTH, UserCreate, UserUpdate
from visitor_register.utils.clock import utcnow
from visitor_register.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 10
DUPLICATE_USERNAME_MESSAGE = "Username already exists."

# Passwords that ship in tutorials and old defaults; never seed an admin with these.
WEAK_ADMIN_PASSWORDS = {"password", "admin", "admin123", "changeme", "change-me", "CHANGE_ME", "123456"}


def parse_positive_int(value, default: int) -> int:
    """Query params arrive as text; anything unparsable or below 1 falls back to default."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def list_users(
    db: Session,
    search: Optional[str] = None,
    role: Optional[str] = None,
    page=None,
    limit=None,
) -> dict:
    page = parse_positive_int(page, 1)
    limit = parse_positive_int(limit, DEFAULT_PAGE_SIZE)

    q = db.query(UserAccount)
    if search:
        q = q.filter(UserAccount.username.icontains(search, autoescape=True))
    if role in ("admin", "staff"):
        q = q.filter(UserAccount.role == UserRole(role))

    total = q.count()
    users = (
        q.order_by(UserAccount.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    return {
        "users": users,
        "pagination": {
            "total_users": total,
            "total_pages": math.ceil(total / limit),
            "current_page": page,
            "per_page": limit,
        },
    }


def create_user(db: Session, data: UserCreate) -> UserAccount:
    account = UserAccount(
        username=data.username,
        password_hash=generate_password_hash(data.password),
        role=data.role,
        created_at=utcnow(),
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_USERNAME_MESSAGE)
    logger.info(f"[USERS] Created {account.role.value} account '{account.username}'")
    return account


def update_user(db: Session, user_id: str, data: UserUpdate, caller: Identity) -> UserAccount:
    changes = data.changes()
    if not changes:
        raise ValidationError("No fields to update.")
    if caller.id == user_id and changes.get("role", UserRole.admin) != UserRole.admin:
        raise ValidationError("Admin users cannot change their own role to non-admin.")

    account = db.query(UserAccount).filter(UserAccount.id == user_id).first()
    if account is None:
        raise NotFoundError("User not found.")

    if "username" in changes:
        account.username = changes["username"]
    if "role" in changes:
        account.role = changes["role"]
    if "password" in changes:
        account.password_hash = generate_password_hash(changes["password"])

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_USERNAME_MESSAGE)
    logger.info(f"[USERS] Updated account {user_id} fields={sorted(changes)}")
    return account


def delete_user(db: Session, user_id: str, caller: Identity) -> None:
    if caller.id == user_id:
        raise ValidationError("Admin users cannot delete themselves.")

    deleted = db.query(UserAccount).filter(UserAccount.id == user_id).delete(synchronize_session=False)
    if deleted == 0:
        db.rollback()
        raise NotFoundError("User not found.")
    db.commit()
    logger.info(f"[USERS] Deleted account {user_id} (by {caller.username})")


def seed_admin(db: Session, username: str, password: Optional[str]) -> Optional[UserAccount]:
    """
    Create the first admin if none exists. Refuses to run with a missing,
    short, or well-known default password instead of silently using one.
    """
    if db.query(UserAccount).filter(UserAccount.role == UserRole.admin).first():
        return None

    if not password:
        raise ConfigurationError("No admin account exists and ADMIN_PASSWORD is not set.")
    if password in WEAK_ADMIN_PASSWORDS or len(password) < MIN_PASSWORD_LENGTH:
        raise ConfigurationError("ADMIN_PASSWORD is a known default or too short; choose another.")

    account = UserAccount(
        username=username,
        password_hash=generate_password_hash(password),
        role=UserRole.admin,
        created_at=utcnow(),
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConfigurationError(f"Cannot seed admin: username '{username}' is taken by a non-admin account.")
    logger.info(f"[USERS] Seeded admin account '{username}'")
    return account
