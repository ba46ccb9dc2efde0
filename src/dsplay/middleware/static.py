"""Static assets for a playground.

Files under ``<playground>/static/`` are served at ``/static/...`` so a
playground can ship its own scripts and stylesheets next to its
templates. Anything else falls through to the dispatcher.
"""

import mimetypes
from pathlib import Path

from dsplay.http.request import Request
from dsplay.http.response import Response
from dsplay.middleware.protocol import AnyResponse, Next


class StaticFiles:
    """Serve files from *directory* for paths under *prefix*.

    Resolves symlinks and refuses anything that escapes *directory*.
    Missing files fall through to the next handler, which answers 404
    unless a route happens to live there.
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._prefix = "/" + prefix.strip("/")
        self._cache_control = cache_control

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if not path.startswith(self._prefix + "/"):
            return await next(request)

        relative = path[len(self._prefix) :].lstrip("/")
        if not relative:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403, content_type="text/plain; charset=utf-8")
        if not file_path.is_file():
            return await next(request)

        content_type, _ = mimetypes.guess_type(str(file_path))
        return Response(
            body=file_path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        ).with_header("Cache-Control", self._cache_control)
