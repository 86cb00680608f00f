"""Settings API: company users, invitations, ads accounts and alert settings.

Reads go through the caller's settings session (cached slices, ?refresh=true
to reload). Every route is scoped to the caller's company.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from app.api.v1.dependencies import (
    AdminUser,
    CurrentSession,
    CurrentUser,
    ensure_loaded,
    get_record_store,
)
from app.application.dtos.settings import UserRow
from app.application.dtos.user import AvatarUpload, UserUpdate
from app.application.interfaces.repositories import IRecordStore
from app.core.config import get_settings
from app.core.limiter import limit_invites, limit_upload, limit_writes
from app.domain.collections import COLLECTION_USERS
from app.domain.entities.user import UserDocument
from app.domain.enums import UserRole
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects.core import DocumentRef
from app.schemas.settings import (
    AdsAccountListResponse,
    AdsAccountRowResponse,
    AlertSettingsResponse,
    AlertSettingsUpdateRequest,
    InvitationRequest,
    InvitationResponse,
    UserListResponse,
    UserRowResponse,
)
from app.shared.utils.sanitization import sanitize_text

router = APIRouter()


async def _company_user(
    records: IRecordStore, user_id: str, company_admin: DocumentRef
) -> UserDocument:
    """The user document, provided it belongs to the company; 404 otherwise."""
    record = await records.get(DocumentRef(COLLECTION_USERS, user_id))
    if record is None:
        raise ResourceNotFoundException("user", user_id)
    target = UserDocument.from_document(user_id, record.data)
    if target.company_admin != company_admin:
        raise ResourceNotFoundException("user", user_id)
    return target


async def _read_avatar(upload: UploadFile) -> AvatarUpload:
    settings = get_settings()
    content_type = (upload.content_type or "").lower()
    if content_type not in settings.avatar_content_types:
        raise ValidationException(
            f"Unsupported avatar type: {content_type or 'unknown'}", field="avatar"
        )
    content = await upload.read()
    if not content:
        raise ValidationException("Avatar file is empty", field="avatar")
    return AvatarUpload(
        content=content,
        content_type=content_type,
        filename=upload.filename or "avatar",
    )


def _authorize_user_update(
    caller: UserDocument,
    target: UserDocument,
    role: UserRole | None,
    ads_account_ids: list[str] | None,
    has_avatar: bool,
) -> None:
    """Who may change what on a user profile.

    Managers may only edit their own name and avatar. Nobody changes the role
    of the company owner. The avatar of a Google sign-up user is only changed
    by that user.
    """
    is_self = caller.uid == target.uid
    if not caller.is_admin:
        if not is_self:
            raise AuthorizationException("user", "update", "Managers can only edit their own profile")
        if role is not None or ads_account_ids is not None:
            raise AuthorizationException("user", "update", "Managers cannot change roles or ads accounts")
    if role is not None and target.ref == target.company_admin and role != UserRole.ADMIN:
        raise ValidationException("The company owner must stay an Admin", field="role")
    if has_avatar and target.is_google_sign_up and not is_self:
        raise AuthorizationException(
            "user", "update", "Only a Google sign-up user can change their own avatar"
        )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    user: CurrentUser,
    session: CurrentSession,
    refresh: bool = False,
) -> UserListResponse:
    """Users of the caller's company."""
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_users(user.company_admin)
        else:
            await store.fetch_users(user.company_admin)
        ensure_loaded(store.users_loaded, store.error, refreshed=refresh)
        return UserListResponse(
            items=[UserRowResponse.from_row(r) for r in store.users],
            loaded=store.users_loaded,
        )


@router.patch("/users/{user_id}", response_model=UserRowResponse)
@limit_upload
async def update_user(
    request: Request,
    user_id: str,
    user: CurrentUser,
    session: CurrentSession,
    records: Annotated[IRecordStore, Depends(get_record_store)],
    name: Annotated[str | None, Form(max_length=200)] = None,
    role: Annotated[UserRole | None, Form()] = None,
    ads_account_ids: Annotated[list[str] | None, Form()] = None,
    notify: Annotated[bool, Form()] = False,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> UserRowResponse:
    """Edit a user: avatar, name, role and ads-account membership, then optionally email them."""
    target = await _company_user(records, user_id, user.company_admin)
    _authorize_user_update(user, target, role, ads_account_ids, avatar is not None)
    upload = await _read_avatar(avatar) if avatar is not None else None

    if ads_account_ids is not None and role is None:
        role = target.role
    if role == UserRole.ADMIN and ads_account_ids is None:
        # Admins belong to every connected account regardless of the selection
        ads_account_ids = []
    update = UserUpdate(
        name=sanitize_text(name),
        role=role.value if role is not None else None,
        avatar=upload,
        current_avatar_url=target.avatar,
    )
    row = UserRow(
        id=target.uid,
        email=target.email,
        name=target.name,
        user_type=target.role.value,
        avatar=target.avatar,
        is_google_sign_up=target.is_google_sign_up,
    )
    store = session.settings
    async with session.lock:
        await store.update_user(
            user_id,
            update,
            company_admin=user.company_admin,
            notify=notify,
            target_user=row,
            ads_account_ids=ads_account_ids,
        )
        for updated in store.users:
            if updated.id == user_id:
                return UserRowResponse.from_row(updated)
    return UserRowResponse.from_row(row)


@router.post("/users/invitations", response_model=InvitationResponse, status_code=201)
@limit_invites
async def invite_user(
    request: Request,
    body: InvitationRequest,
    user: AdminUser,
    session: CurrentSession,
) -> InvitationResponse:
    """Invite a user into the company and email them the accept link."""
    async with session.lock:
        invitation_id, invitation = await session.settings.invite_user(
            email=body.email,
            role=body.role,
            name=body.name,
            ads_account_ids=body.ads_account_ids,
            inviter=user,
        )
    return InvitationResponse.from_entity(invitation_id, invitation)


@router.get("/ads-accounts", response_model=AdsAccountListResponse)
async def list_ads_accounts(
    user: CurrentUser,
    session: CurrentSession,
    refresh: bool = False,
) -> AdsAccountListResponse:
    """Connected ads accounts of the caller's company."""
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_ads_accounts(user.company_admin)
        else:
            await store.fetch_ads_accounts(user.company_admin)
        ensure_loaded(store.ads_accounts_loaded, store.error, refreshed=refresh)
        return AdsAccountListResponse(
            items=[AdsAccountRowResponse.from_row(a) for a in store.ads_accounts],
            loaded=store.ads_accounts_loaded,
        )


@router.get("/alert-settings", response_model=AlertSettingsResponse)
async def get_alert_settings(
    user: CurrentUser,
    session: CurrentSession,
    refresh: bool = False,
) -> AlertSettingsResponse:
    """Alert toggles of the signed-in user."""
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_alert_settings(user.uid)
        else:
            await store.fetch_alert_settings(user.uid)
        ensure_loaded(store.loaded_user_id == user.uid, store.error, refreshed=refresh)
        return AlertSettingsResponse.from_result(store.alert_settings, user.uid)


@router.patch("/alert-settings", response_model=AlertSettingsResponse)
@limit_writes
async def update_alert_settings(
    request: Request,
    body: AlertSettingsUpdateRequest,
    user: CurrentUser,
    session: CurrentSession,
) -> AlertSettingsResponse:
    """Update the signed-in user's alert toggles (created with defaults if missing)."""
    store = session.settings
    async with session.lock:
        await store.update_alert_settings(user.uid, body.toggles)
        ensure_loaded(store.loaded_user_id == user.uid, store.error, refreshed=True)
        return AlertSettingsResponse.from_result(store.alert_settings, user.uid)
