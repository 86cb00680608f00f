"""Transactional email via the internal dispatch endpoint (implements IEmailDispatcher)."""

from __future__ import annotations

from typing import Any

import httpx

from app.infrastructure.exceptions import EmailDispatchError
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class HttpEmailDispatcher:
    """POSTs {to, templateId, name, variables} to the email endpoint.

    Non-2xx responses and transport errors raise EmailDispatchError with the
    endpoint's error payload (or the transport message) as reason.
    """

    def __init__(
        self,
        endpoint_url: str | None,
        http_client: httpx.AsyncClient,
        token: str | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._http = http_client
        self._token = token

    async def send(
        self,
        to: str,
        template_id: str,
        name: str,
        variables: dict[str, Any] | None = None,
    ) -> None:
        if not self._endpoint_url:
            raise EmailDispatchError(to, "email endpoint not configured")
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        body = {
            "to": to,
            "templateId": template_id,
            "name": name,
            "variables": variables or {},
        }
        try:
            resp = await self._http.post(self._endpoint_url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise EmailDispatchError(to, str(e)) from e
        if not resp.is_success:
            reason = _error_reason(resp)
            logger.warning(
                "Email endpoint answered %s for template %s: %s",
                resp.status_code,
                template_id,
                reason,
            )
            raise EmailDispatchError(to, reason)
        logger.info("Sent email template %s", template_id)


def _error_reason(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("message") or payload)
    return str(payload)
