"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response | LiveResponse

Built-in middleware (installed by ``Playground`` itself):
    RequestLogger -- One access-log line per request
    StaticFiles -- Serve ``<playground>/static`` under ``/static``
"""

from dsplay.middleware.access_log import RequestLogger
from dsplay.middleware.protocol import Middleware, Next
from dsplay.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "RequestLogger",
    "StaticFiles",
]
