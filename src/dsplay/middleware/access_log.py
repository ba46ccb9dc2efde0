"""Access logging: one INFO line per request.

Live streams are logged when the stream is handed to the transport, not
when it closes.
"""

import logging
import time

from dsplay.errors import HTTPError
from dsplay.http.request import Request
from dsplay.http.response import LiveResponse
from dsplay.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("dsplay.server")


class RequestLogger:
    """Log method, path, status, and elapsed time for every request."""

    __slots__ = ("_live_header",)

    def __init__(self, live_header: str = "datastar-request") -> None:
        self._live_header = live_header

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        start = time.perf_counter()
        try:
            response = await next(request)
        except HTTPError as exc:
            self._log(request, str(exc.status), start)
            raise
        if isinstance(response, LiveResponse):
            self._log(request, "live stream", start)
        else:
            self._log(request, str(response.status), start)
        return response

    def _log(self, request: Request, outcome: str, start: float) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        marker = " [live-update]" if request.is_live_update(self._live_header) else ""
        logger.info(
            "%s %s%s -> %s (%.1fms)", request.method, request.path, marker, outcome, elapsed_ms
        )
