"""Pytest configuration and fixtures for the settings service.

Uses app.main:app for HTTP tests with FastAPI dependency overrides: the
Firestore record store, the ID-token check and the session registry are
replaced by in-memory fakes (tests/fakes.py). All imports use app.*.
"""

import os
import tempfile
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="adalert-test-"))
os.environ.setdefault("TELEMETRY_ENABLED", "false")

from app.api.v1.dependencies import (  # noqa: E402
    build_session,
    get_record_store,
    get_session_registry,
    get_token_claims,
    require_billing_configured,
)
from app.application.services.settings_sync import SettingsSyncStore  # noqa: E402
from app.application.services.sync_session import SettingsSessionRegistry  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.main import app  # noqa: E402
from tests.fakes import (  # noqa: E402
    ADMIN_ID,
    FakeAvatarStorage,
    FakeCountryNameResolver,
    FakeEmailDispatcher,
    FakePaymentGateway,
    InMemoryRecordStore,
    seed_company,
)

limiter.enabled = False


@pytest.fixture
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def company(records: InMemoryRecordStore) -> dict:
    return seed_company(records)


@pytest.fixture
def email() -> FakeEmailDispatcher:
    return FakeEmailDispatcher()


@pytest.fixture
def avatars() -> FakeAvatarStorage:
    return FakeAvatarStorage()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def countries() -> FakeCountryNameResolver:
    return FakeCountryNameResolver()


@pytest.fixture
def settings_store(
    records: InMemoryRecordStore,
    email: FakeEmailDispatcher,
    avatars: FakeAvatarStorage,
) -> SettingsSyncStore:
    return SettingsSyncStore(
        records,
        email,
        avatars,
        profile_update_template="tpl-profile",
        invitation_template="tpl-invite",
        app_base_url="https://app.test/",
    )


@pytest.fixture
def token_claims() -> dict[str, Any]:
    """Claims returned for every request; tests change "sub" to act as another user."""
    return {"sub": ADMIN_ID, "email": "owner@acme.test", "firebase": {"sign_in_provider": "password"}}


@pytest.fixture
def registry(
    records: InMemoryRecordStore,
    email: FakeEmailDispatcher,
    avatars: FakeAvatarStorage,
    gateway: FakePaymentGateway,
    countries: FakeCountryNameResolver,
) -> SettingsSessionRegistry:
    def factory(uid: str):
        return build_session(
            uid,
            records,
            get_settings(),
            email=email,
            avatars=avatars,
            gateway=gateway,
            countries=countries,
        )

    return SettingsSessionRegistry(factory, ttl_seconds=60)


@pytest.fixture
async def client(
    records: InMemoryRecordStore,
    registry: SettingsSessionRegistry,
    token_claims: dict[str, Any],
) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) with in-memory collaborators."""

    async def claims() -> dict[str, Any]:
        return token_claims

    app.dependency_overrides[get_token_claims] = claims
    app.dependency_overrides[get_record_store] = lambda: records
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[require_billing_configured] = lambda: None
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client() -> AsyncClient:
    """Client without overrides (real token check and Firestore lookup)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
