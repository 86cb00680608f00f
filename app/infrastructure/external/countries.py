"""Country-code to display-name lookup (implements ICountryNameResolver)."""

from __future__ import annotations

import httpx

from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RestCountryNameResolver:
    """Resolve ISO alpha-2 codes with a REST Countries style endpoint.

    GET {base_url}/{code} returns a list whose first entry carries
    name.common. Any failure falls back to the code itself.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient,
        timeout: float = 5.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client
        self._timeout = timeout
        self._cache: dict[str, str] = {}

    async def resolve(self, code: str) -> str:
        key = code.strip().upper()
        if not key:
            return code
        if key in self._cache:
            return self._cache[key]
        try:
            resp = await self._http.get(f"{self._base_url}/{key}", timeout=self._timeout)
            resp.raise_for_status()
            payload = resp.json()
            entry = payload[0] if isinstance(payload, list) else payload
            name = entry["name"]["common"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("Country lookup failed for %s, keeping code: %s", key, e)
            return code
        self._cache[key] = name
        return name
