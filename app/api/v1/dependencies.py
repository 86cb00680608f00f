"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the record store, the signed-in user and
their settings session. All services are built from infrastructure
implementations here; routes depend only on these dependencies, not on
infra directly.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.interfaces.repositories import IRecordStore
from app.application.interfaces.services import (
    ICountryNameResolver,
    IEmailDispatcher,
    IPaymentGateway,
)
from app.application.interfaces.storage import IAvatarStorage
from app.application.services.ads_account_selection import UserAdsAccountsStore
from app.application.services.company_deletion import CompanyDeletionService
from app.application.services.registration_service import RegistrationService
from app.application.services.settings_sync import SettingsSyncStore
from app.application.services.subscription_provisioning import (
    SubscriptionProvisioningService,
)
from app.application.services.sync_session import (
    SessionFactory,
    SettingsSession,
    SettingsSessionRegistry,
)
from app.core.config import Settings, get_settings
from app.domain.collections import COLLECTION_USERS
from app.domain.entities.user import UserDocument
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.domain.value_objects.core import DocumentRef
from app.infrastructure.external.countries import RestCountryNameResolver
from app.infrastructure.external.email import HttpEmailDispatcher
from app.infrastructure.external.payments import StripePaymentGateway
from app.infrastructure.external.storage.factory import create_avatar_storage
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.client import (
    get_firebase_project_id,
    get_firestore_client,
)
from app.infrastructure.firebase.repositories import FirestoreRecordStore
from app.infrastructure.security.firebase_token import verify_firebase_id_token

_bearer = HTTPBearer(auto_error=False)


def _get_firestore_client_or_raise() -> FirestoreRESTClient:
    """Return Firestore client or raise HTTPException 503 with standard message."""
    client = get_firestore_client()
    if not client:
        raise HTTPException(
            status_code=503,
            detail="Firestore not configured (set FIREBASE_SERVICE_ACCOUNT_KEY or PATH)",
        )
    return client


def get_record_store() -> IRecordStore:
    """Record store over the process-wide Firestore client."""
    return FirestoreRecordStore(_get_firestore_client_or_raise())


async def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> dict[str, Any]:
    """Verified Firebase ID token claims from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Missing bearer token")
    project_id = get_firebase_project_id()
    if not project_id:
        raise HTTPException(
            status_code=503,
            detail="Firebase project not configured (set FIREBASE_PROJECT_ID)",
        )
    try:
        return await verify_firebase_id_token(credentials.credentials, project_id)
    except ValueError as e:
        raise AuthenticationException("Invalid or expired token") from e


async def get_current_user(
    claims: Annotated[dict[str, Any], Depends(get_token_claims)],
    records: Annotated[IRecordStore, Depends(get_record_store)],
) -> UserDocument:
    """The user document of the token's uid; 401 until the user has registered."""
    uid = claims["sub"]
    record = await records.get(DocumentRef(COLLECTION_USERS, uid))
    if record is None:
        raise AuthenticationException("User is not registered")
    return UserDocument.from_document(uid, record.data)


def require_admin(
    user: Annotated[UserDocument, Depends(get_current_user)],
) -> UserDocument:
    """Current user, provided they are an Admin of their company."""
    if not user.is_admin:
        raise AuthorizationException(
            resource="company", action="manage", message="Admin role required"
        )
    return user


def require_billing_configured() -> None:
    """503 when no Stripe key is configured (billing calls would all fail)."""
    settings = get_settings()
    if settings.stripe_secret_key is None or not settings.stripe_price_id:
        raise HTTPException(
            status_code=503,
            detail="Billing not configured (set STRIPE_SECRET_KEY and STRIPE_PRICE_ID)",
        )


def get_registration_service(
    records: Annotated[IRecordStore, Depends(get_record_store)],
) -> RegistrationService:
    return RegistrationService(records)


def build_session(
    uid: str,
    records: IRecordStore,
    settings: Settings,
    *,
    email: IEmailDispatcher,
    avatars: IAvatarStorage,
    gateway: IPaymentGateway,
    countries: ICountryNameResolver,
) -> SettingsSession:
    """Assemble one user's session from its collaborators."""
    return SettingsSession(
        uid=uid,
        settings=SettingsSyncStore(
            records,
            email,
            avatars,
            profile_update_template=settings.email_template_profile_update,
            invitation_template=settings.email_template_invitation,
            app_base_url=settings.app_base_url,
            invitation_ttl=timedelta(days=settings.invitation_ttl_days),
        ),
        ads_accounts=UserAdsAccountsStore(records),
        deletion=CompanyDeletionService(records),
        provisioning=SubscriptionProvisioningService(
            records,
            gateway,
            countries,
            price_id=settings.stripe_price_id,
            first_account_price=settings.subscription_price_first_ads_account,
            additional_account_price=settings.subscription_price_additional_ads_account,
            invoices_limit=settings.invoices_page_size,
        ),
    )


def build_session_factory(app: FastAPI) -> SessionFactory:
    """Session factory over Firestore, Stripe, the email endpoint and avatar storage.

    The shared HTTP client is read from app.state when a session is built,
    i.e. after startup.
    """

    def factory(uid: str) -> SettingsSession:
        settings = get_settings()
        http_client = app.state.http_client
        token = settings.email_endpoint_token
        return build_session(
            uid,
            get_record_store(),
            settings,
            email=HttpEmailDispatcher(
                settings.email_endpoint_url,
                http_client,
                token=token.get_secret_value() if token else None,
            ),
            avatars=create_avatar_storage(settings),
            gateway=StripePaymentGateway(),
            countries=RestCountryNameResolver(
                settings.country_lookup_url,
                http_client,
                timeout=settings.country_lookup_timeout_seconds,
            ),
        )

    return factory


def get_session_registry(request: Request) -> SettingsSessionRegistry:
    registry = getattr(request.app.state, "session_registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return registry


async def get_session(
    user: Annotated[UserDocument, Depends(get_current_user)],
    registry: Annotated[SettingsSessionRegistry, Depends(get_session_registry)],
) -> SettingsSession:
    """The signed-in user's settings session (created on first use)."""
    return await registry.get_or_create(user.uid)


CurrentUser = Annotated[UserDocument, Depends(get_current_user)]
AdminUser = Annotated[UserDocument, Depends(require_admin)]
CurrentSession = Annotated[SettingsSession, Depends(get_session)]


def ensure_loaded(loaded: bool, error: str | None, refreshed: bool = False) -> None:
    """502 with the recorded message when a slice could not be loaded.

    A failed refresh keeps the previous data and its loaded flag, so after a
    refresh the recorded error alone decides.
    """
    if not loaded or (refreshed and error is not None):
        raise HTTPException(status_code=502, detail=error or "Could not load data")
