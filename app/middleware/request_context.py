"""Request and correlation ID middleware.

Forwards or generates X-Request-ID and X-Correlation-ID, stores both on
scope state (request.state.request_id / correlation_id) and echoes them on
the response. Client values are sanitized (length + character set) before
they can reach logs. Raw ASGI.
"""

import re
import uuid
from typing import Callable

ID_MAX_LENGTH = 64
_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1," + str(ID_MAX_LENGTH) + r"}$")


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def sanitize_id(raw: str | None) -> str | None:
    """Return the stripped value if it is a safe identifier, else None."""
    if raw is None:
        return None
    value = raw.strip()
    return value if _ID_PATTERN.match(value) else None


def RequestContextMiddleware(
    app: Callable,
    request_id_header: str = "X-Request-ID",
    correlation_id_header: str = "X-Correlation-ID",
) -> Callable:
    """Attach request and correlation IDs to each HTTP request and response.

    The correlation ID falls back to the request ID when the client sends none.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_id(get_header(scope, request_id_header)) or str(uuid.uuid4())
        correlation_id = (
            sanitize_id(get_header(scope, correlation_id_header)) or request_id
        )
        state = scope.setdefault("state", {})
        state["request_id"] = request_id
        state["correlation_id"] = correlation_id
        extra = [
            (request_id_header.encode(), request_id.encode()),
            (correlation_id_header.encode(), correlation_id.encode()),
        ]

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), *extra]
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
