"""ASGI entry point for the ad-alert settings API (uvicorn app.main:app).

create_app() reads settings when called, so tests can set the environment
before the module is imported.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.v1 import api_router
from app.core.config import Settings, get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limiter
from app.infrastructure.external.storage.local_storage import PUBLIC_PREFIX
from app.middleware import (
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from app.shared.telemetry import setup_logging


def _cors_origins(settings: Settings) -> list[str]:
    return [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.limiter = limiter
    register_exception_handlers(app)

    # Last added runs first: size limit, request ids, security headers, CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            settings.request_id_header,
            settings.correlation_id_header,
        ],
        expose_headers=[settings.request_id_header, settings.correlation_id_header],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestContextMiddleware,
        request_id_header=settings.request_id_header,
        correlation_id_header=settings.correlation_id_header,
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_upload_bytes=settings.max_upload_size)

    app.include_router(api_router, prefix="/api/v1")

    if settings.storage_backend == "local":
        # Avatars on local disk are served by the app itself.
        app.mount(
            PUBLIC_PREFIX.rstrip("/"),
            StaticFiles(directory=settings.storage_root, check_dir=False),
            name="media",
        )
    return app


app = create_app()
