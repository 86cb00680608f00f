"""Security headers middleware.

Adds security response headers to every response. Responses under the API
prefix also get ``Cache-Control: no-store`` since they carry user, billing
and account data. Raw ASGI.
"""

from typing import Callable

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
NO_STORE = (b"cache-control", b"no-store")


def SecurityHeadersMiddleware(
    app: Callable,
    headers: dict[str, str] | None = None,
    no_store_prefix: str = "/api/",
) -> Callable:
    """Set security headers on all responses (existing headers win). Raw ASGI."""
    resolved = headers if headers is not None else DEFAULT_HEADERS
    header_list = [(k.lower().encode(), v.encode()) for k, v in resolved.items()]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        wanted = list(header_list)
        if scope.get("path", "").startswith(no_store_prefix):
            wanted.append(NO_STORE)

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                seen = {h[0].lower() for h in headers}
                headers.extend(h for h in wanted if h[0] not in seen)
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
