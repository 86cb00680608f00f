"""Request body size limit middleware.

Multipart bodies (avatar uploads) may use up to ``max_upload_bytes``;
every other body is held to ``max_body_bytes``. Both Content-Length and
chunked bodies are enforced. Raw ASGI.
"""

import json
from typing import Any, Callable

from app.middleware.request_context import get_header


async def _send_413(send: Callable, max_bytes: int, actual: int | None = None) -> None:
    """Send 413 in the same body shape as the API exception handlers."""
    details: dict[str, Any] = {"max_bytes": max_bytes}
    if actual is not None:
        details["content_length"] = actual
    body = json.dumps(
        {
            "error": "PAYLOAD_TOO_LARGE",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": details,
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def _limit_for(scope: dict, max_body_bytes: int, max_upload_bytes: int) -> int:
    content_type = (get_header(scope, "content-type") or "").lower()
    if content_type.startswith("multipart/form-data"):
        return max_upload_bytes
    return max_body_bytes


def RequestSizeLimitMiddleware(
    app: Callable,
    max_upload_bytes: int,
    max_body_bytes: int = 1024 * 1024,
) -> Callable:
    """Reject request bodies above the limit for their content type. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        max_bytes = _limit_for(scope, max_body_bytes, max_upload_bytes)

        declared = get_header(scope, "content-length")
        if declared:
            try:
                length = int(declared)
            except ValueError:
                length = 0
            if length > max_bytes:
                await _send_413(send, max_bytes, length)
                return
            await app(scope, receive, send)
            return

        # No Content-Length: buffer the (chunked) body up to the limit, then replay it.
        chunks: list[bytes] = []
        total = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            if message["type"] != "http.request":
                continue
            body = message.get("body", b"")
            total += len(body)
            if total > max_bytes:
                await _send_413(send, max_bytes, total)
                return
            chunks.append(body)
            if not message.get("more_body", False):
                break

        async def replay() -> dict:
            if chunks:
                return {
                    "type": "http.request",
                    "body": chunks.pop(0),
                    "more_body": bool(chunks),
                }
            return await receive()

        await app(scope, replay, send)

    return asgi_app
