"""Company API: cascading deletion of the caller's company. Admin only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import AdminUser, CurrentSession, get_session_registry
from app.application.services.sync_session import SettingsSessionRegistry
from app.core.limiter import limit_writes
from app.schemas.company import DeletionResponse

router = APIRouter()


@router.delete("", response_model=DeletionResponse)
@limit_writes
async def delete_company(
    request: Request,
    user: AdminUser,
    session: CurrentSession,
    registry: Annotated[SettingsSessionRegistry, Depends(get_session_registry)],
) -> DeletionResponse:
    """Delete every record of the company, then end the caller's session.

    Not atomic: on failure the collections deleted so far stay deleted and the
    request answers with the failing step's error.
    """

    async def logout() -> None:
        await registry.discard(user.uid)

    async with session.lock:
        report = await session.delete_company(user.company_admin, logout)
    return DeletionResponse.from_report(report)
