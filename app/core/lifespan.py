"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (shared HTTP
client, Firestore client, Stripe key, settings sessions, telemetry).
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings

logger = logging.getLogger(__name__)


async def _purge_sessions(app: FastAPI, interval_seconds: float) -> None:
    """Drop idle settings sessions every interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        registry = app.state.session_registry
        if registry is None:
            return
        purged = await registry.purge_expired()
        if purged:
            logger.debug("Purged %d idle settings session(s)", purged)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, Firestore client, Stripe key,
    settings session registry and its idle purge, telemetry (if enabled).
    Shutdown order: purge stopped, sessions cleared, Firestore client close,
    shared HTTP client close, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for Firestore, email dispatch and country lookup (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=30.0)

    from app.infrastructure.firebase import init_firebase

    init_firebase(http_client=app.state.http_client)

    if settings.stripe_secret_key is not None:
        from app.infrastructure.external.payments import configure_stripe

        configure_stripe(settings.stripe_secret_key.get_secret_value())
    else:
        logger.info("Stripe secret key not configured; billing routes answer 503")

    from app.api.v1.dependencies import build_session_factory
    from app.application.services.sync_session import SettingsSessionRegistry

    app.state.session_registry = SettingsSessionRegistry(
        build_session_factory(app), ttl_seconds=settings.session_ttl_seconds
    )
    purge_task = asyncio.create_task(
        _purge_sessions(app, settings.session_ttl_seconds)
    )

    if settings.telemetry_enabled:
        from app.shared.telemetry.telemetry import TelemetryConfig

        app.state.telemetry = TelemetryConfig.from_settings(settings)
        app.state.telemetry.setup(app)

    yield

    # ---- Shutdown ----
    purge_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await purge_task

    registry = getattr(app.state, "session_registry", None)
    if registry is not None:
        logger.info("Dropping %d settings session(s)", len(registry))
        app.state.session_registry = None

    from app.infrastructure.firebase import close_firebase

    await close_firebase()

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Shared HTTP client closed")

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        telemetry.shutdown()
        app.state.telemetry = None
        logger.info("Telemetry shutdown complete")
