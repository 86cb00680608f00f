"""HTTP middleware: request size limit, request/correlation IDs, security headers.

Applied in main app; order matters (last added = outermost).
Import and use from app.main.
"""

from app.middleware.request_context import RequestContextMiddleware
from app.middleware.request_size_limit import RequestSizeLimitMiddleware
from app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestContextMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
