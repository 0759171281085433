import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .database import create_db_engine, create_session_factory, create_tables
from .redis_client import close_redis, open_redis, redis_healthy
from .routers import blocked_dates, bookings, email, services, slots

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        engine = create_db_engine(settings.resolved_database_url)
        create_tables(engine)
        app.state.session_factory = create_session_factory(engine)
        app.state.redis = open_redis(settings.redis_url)
        logger.info("HeyU booking API started")

        yield

        close_redis(app.state.redis)
        engine.dispose()

    app = FastAPI(title="HeyU Booking API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===== Error shape: {"success": false, "message": ...} =====
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = {"success": False, **exc.detail}
        else:
            content = {"success": False, "message": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Request validation failed",
                "errors": [err["msg"] for err in exc.errors()],
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )

    # ===== Routes =====
    @app.get("/")
    def index():
        return {
            "success": True,
            "message": "HeyU 禾屿 booking API",
            "endpoints": {
                "services": "/api/services",
                "bookings": "/api/bookings",
                "timeSlots": "/api/time-slots/available",
                "blockedDates": "/api/blocked-dates",
                "email": "/api/email/check",
            },
        }

    @app.get("/health")
    def health(request: Request):
        return {"status": "ok", "redis": redis_healthy(request.app.state.redis)}

    app.include_router(services.router)
    app.include_router(bookings.router)
    app.include_router(slots.router)
    app.include_router(blocked_dates.router)
    app.include_router(email.router)

    return app


app = create_app()
