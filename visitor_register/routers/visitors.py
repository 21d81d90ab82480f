# visitor_register/routers/visitors.py
"""
Visitor endpoints.
Public (kiosk):  POST /validate, POST /visitors
Staff (bearer):  GET /visitors/active, GET /visitors/past,
                 PUT /visitors/{id}/deactivate, GET /metrics/visitors
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from visitor_register.config import Settings
from visitor_register.dependencies import get_db, get_settings, require_staff
from visitor_register.schemas.setting import MessageOut
from visitor_register.schemas.visitor import VisitorCreate, VisitorIdentity, VisitorMetricsOut, VisitorOut
from visitor_register.services import visitor_service
from visitor_register.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/validate", response_model=MessageOut, summary="Kiosk: pre-check visitor identity fields")
def validate_visitor(body: VisitorIdentity):
    """Runs the identity rules only; nothing is stored."""
    logger.debug(f"[VALIDATE] Passed for {body.first_name} {body.last_name}")
    return {"message": "Validation successful"}


@router.post("/visitors", response_model=VisitorOut, status_code=status.HTTP_201_CREATED,
             summary="Kiosk: check a visitor in")
def create_visitor(body: VisitorCreate, db: Session = Depends(get_db)):
    return visitor_service.intake(db, body)


@router.get("/visitors/active", response_model=list[VisitorOut], summary="Active visits, newest entry first")
def get_active_visitors(db: Session = Depends(get_db), _=Depends(require_staff)):
    return visitor_service.list_active(db)


@router.get("/visitors/past", response_model=list[VisitorOut], summary="Finished visits, latest exit first")
def get_past_visitors(db: Session = Depends(get_db), _=Depends(require_staff)):
    return visitor_service.list_past(db)


@router.put("/visitors/{visitor_id}/deactivate", response_model=VisitorOut, summary="Check a visitor out")
def deactivate_visitor(visitor_id: str, db: Session = Depends(get_db), _=Depends(require_staff)):
    return visitor_service.checkout(db, visitor_id)


@router.get("/metrics/visitors", response_model=VisitorMetricsOut, summary="Today's count, active count, average duration")
def get_visitor_metrics(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _=Depends(require_staff),
):
    return VisitorMetricsOut(**visitor_service.compute_metrics(db, settings.TIMEZONE))
