# visitor_register/routers/auth.py
"""Staff/admin login: exchanges username + password for a bearer token."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from visitor_register.config import Settings
from visitor_register.dependencies import get_db, get_settings
from visitor_register.schemas.auth import LoginRequest, LoginResponse
from visitor_register.services.auth_service import authenticate

router = APIRouter()


@router.post("/login", response_model=LoginResponse, summary="Log in and receive an access token")
def login(body: LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    token, identity = authenticate(
        db,
        body.username,
        body.password,
        settings.JWT_SECRET,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    return LoginResponse(access_token=token, user=identity)
