# visitor_register/main.py
"""
FastAPI application entry point.
Includes request logging middleware, global error handlers, and all routers.

The database handle is opened in the lifespan (tables created, admin and
default settings seeded) and closed on shutdown. Startup aborts if the
admin cannot be seeded safely.
"""

import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError

from visitor_register import __version__
from visitor_register.config import Settings, settings as default_settings
from visitor_register.database import Database
from visitor_register.exceptions import AppError, ValidationError
from visitor_register.routers import auth, health, settings as settings_router, users, visitors
from visitor_register.services.settings_service import UPLOADS_URL_PREFIX, seed_default_settings
from visitor_register.services.user_service import seed_admin
from visitor_register.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def field_errors(errors) -> list[dict]:
    """Flatten pydantic error dicts into [{field, message}], one per failing field."""
    result = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        result.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return result


def error_response(exc: AppError) -> JSONResponse:
    content = {"message": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return error_response(exc)

    # Sync: SlowAPIMiddleware calls this handler directly
    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"[RATE LIMIT] {get_remote_address(request)} exceeded {exc.detail} on {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"message": "Too many requests, please try again later."},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(ValidationError("Validation failed", errors=field_errors(exc.errors())))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Database error"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings
    setup_logging(app_settings.LOG_LEVEL, app_settings.LOG_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Visitor Register starting up...")
        database = Database(app_settings.DATABASE_URL)
        database.create_tables()
        with database.session() as db:
            seed_admin(db, app_settings.ADMIN_USERNAME, app_settings.ADMIN_PASSWORD)
            seed_default_settings(db)
        app.state.database = database
        logger.info("✅ Database tables ready")
        logger.info(f"🌐 Listening on http://{app_settings.BACKEND_HOST}:{app_settings.BACKEND_PORT}")
        yield
        logger.info("🛑 Visitor Register shutting down...")
        database.dispose()

    app = FastAPI(
        title="Visitor Register API",
        description="Front-desk visitor check-in/check-out register.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[app_settings.RATE_LIMIT],
        storage_uri="memory://",
        enabled=app_settings.RATE_LIMIT_ENABLED,
    )
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Request Timing Middleware ────────────────────────────────────────
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = round((time.time() - start) * 1000, 2)
        logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
        return response

    register_exception_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────
    app.include_router(health.router,          prefix="/api", tags=["Health"])
    app.include_router(auth.router,            prefix="/api", tags=["Auth"])
    app.include_router(visitors.router,        prefix="/api", tags=["Visitors"])
    app.include_router(users.router,           prefix="/api", tags=["Users"])
    app.include_router(settings_router.router, prefix="/api", tags=["Settings"])

    os.makedirs(app_settings.UPLOAD_DIR, exist_ok=True)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=app_settings.UPLOAD_DIR), name="uploads")

    @app.get("/", include_in_schema=False)
    def root():
        return {"message": "Visitor Register backend is running."}

    return app


app = create_app()
