# visitor_register/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB.
"""

from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

from visitor_register.utils.clock import utcnow

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request):
    result = {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
    }

    try:
        request.app.state.database.ping()
        result["database"] = "ok"
    except SQLAlchemyError as e:
        result["database"] = f"error: {e.__class__.__name__}"
        result["status"] = "degraded"

    return result
