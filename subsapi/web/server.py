# subsapi/web/server.py
from __future__ import annotations

import logging
import platform

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from subsapi.config import settings
from subsapi.container import init_db
from subsapi.errors import AppError
from subsapi.web.errors import (
    app_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from subsapi.web.middleware_logging import LoggingMiddleware
from subsapi.web.routes import router as api_router
from subsapi.web.subscription_routes import router as subscriptions_router
from subsapi.web.user_routes import router as users_router

log = logging.getLogger("startup")


def create_app() -> FastAPI:
    # Swagger only in development
    docs = settings.is_development
    app = FastAPI(
        title="Subscription Management API",
        docs_url="/docs" if docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs else None,
    )

    # Middleware
    app.add_middleware(LoggingMiddleware)

    # Routers
    app.include_router(api_router)
    app.include_router(users_router)
    app.include_router(subscriptions_router)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def on_startup():
        log.info(
            "app_startup | platform=%s python=%s env=%s docs=%s",
            platform.platform(),
            platform.python_version(),
            settings.ENVIRONMENT,
            docs,
        )
        # in production migrations go through alembic
        if settings.INIT_DB_ON_START:
            await init_db()
            log.info("DB init done (create_all enabled by ENV)")

    return app


app = create_app()
