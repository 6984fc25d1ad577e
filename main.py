"""
main.py — FastAPI application factory for the portfolio content service.
"""

import os
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import account_routes
import content_routes
import inbox_routes
from archiver import HousekeepingScheduler
from auth import seed_default_user
from config import Config
from database import init_db, make_engine, make_session_factory
from deps import RateLimiter
from errors import AppError
from mailer import Mailer
from record_store import RecordStore
from resources import Resources
from utils import logger


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
            for err in exc.errors()
        ]
        logger.warning("Request validation failed on %s: %s", request.url.path, details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Something went wrong!", "message": str(exc)},
        )


def create_app(config: Optional[Config] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    config = config or Config()

    app = FastAPI(
        title="Portfolio Content API",
        description="Content management backend for a personal portfolio site.",
        version="1.0.0",
    )

    # CORS: dashboard and public site are served from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    engine = make_engine(config.DATABASE_URL)
    resources = Resources(RecordStore(config.DATA_DIR))

    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.resources = resources
    app.state.mailer = mailer or Mailer(config)
    app.state.contact_limiter = RateLimiter(config.CONTACT_RATE_LIMIT, config.CONTACT_RATE_WINDOW_SECONDS)
    app.state.scheduler = HousekeepingScheduler(resources, max_age_days=config.MESSAGE_ARCHIVE_DAYS)

    register_error_handlers(app)

    app.include_router(account_routes.router, prefix="/api")
    app.include_router(content_routes.router, prefix="/api")
    app.include_router(inbox_routes.router, prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    # ── Startup / shutdown ───────────────────────────

    @app.on_event("startup")
    async def on_startup():
        """Create tables, seed the first account, normalize legacy data, start timers."""
        if config.uses_default_secret:
            logger.warning("JWT_SECRET_KEY is not set; using the development default")
        os.makedirs(config.DATA_DIR, exist_ok=True)
        os.makedirs(os.path.join(config.PUBLIC_DIR, "assets", "images"), exist_ok=True)
        os.makedirs(os.path.join(config.PUBLIC_DIR, "assets", "certificates"), exist_ok=True)

        init_db(engine)
        db = app.state.session_factory()
        try:
            seed_default_user(db, config)
        finally:
            db.close()

        resources.backfill_messages()

        if config.SCHEDULER_ENABLED:
            app.state.scheduler.start()
        logger.info("Application started — data dir: %s", config.DATA_DIR)

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.scheduler.stop()
        engine.dispose()
        logger.info("Application stopped")

    return app


app = create_app()
