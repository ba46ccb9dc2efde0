"""Error handling pipeline for playground requests.

Maps HTTPError exceptions, scan and template failures, and unexpected
exceptions to plain-text responses. Live streams never reach this
module once their headers are sent; the engine logs and closes instead.
"""

import logging
import traceback

from dsplay.errors import HTTPError, ScanError, TemplateRenderError
from dsplay.http.request import Request
from dsplay.http.response import Response

logger = logging.getLogger("dsplay.server")

_TEXT = "text/plain; charset=utf-8"


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
    response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status, content_type=_TEXT)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def scan_error_response(exc: ScanError) -> Response:
    """500 for a route table that could not be built."""
    logger.error("Error scanning playgrounds: %s", exc)
    return Response(body=f"Error scanning playgrounds: {exc}", status=500, content_type=_TEXT)


def template_error_response(exc: TemplateRenderError, url_path: str, method: str) -> Response:
    """500 for a section that failed to render on the HTML path."""
    logger.error("Template error on %s %s: %s", method, url_path, exc)
    return Response(body=f"Template error: {exc}", status=500, content_type=_TEXT)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)
    if debug:
        body = "".join(traceback.format_exception(exc))
    else:
        body = "Internal Server Error"
    return Response(body=body, status=500, content_type=_TEXT)
