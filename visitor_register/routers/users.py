# visitor_register/routers/users.py
"""Account management: admin only."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from visitor_register.dependencies import get_db, require_admin
from visitor_register.schemas.auth import Identity
from visitor_register.schemas.setting import MessageOut
from visitor_register.schemas.user import UserCreate, UserListOut, UserOut, UserUpdate
from visitor_register.services import user_service

router = APIRouter()


@router.get("/users", response_model=UserListOut, summary="List accounts: search, role filter, pagination")
def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """page and limit are parsed leniently: bad or non-positive values fall back to 1 and 10."""
    return user_service.list_users(db, search=search, role=role, page=page, limit=limit)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED, summary="Create an account")
def create_user(body: UserCreate, db: Session = Depends(get_db), _: Identity = Depends(require_admin)):
    return user_service.create_user(db, body)


@router.put("/users/{user_id}", response_model=MessageOut, summary="Update username, password or role")
def update_user(
    user_id: str,
    body: UserUpdate,
    db: Session = Depends(get_db),
    caller: Identity = Depends(require_admin),
):
    user_service.update_user(db, user_id, body, caller)
    return {"message": "User updated successfully."}


@router.delete("/users/{user_id}", response_model=MessageOut, summary="Delete an account")
def delete_user(user_id: str, db: Session = Depends(get_db), caller: Identity = Depends(require_admin)):
    user_service.delete_user(db, user_id, caller)
    return {"message": "User deleted successfully."}
