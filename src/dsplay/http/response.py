"""HTTP responses with a chainable ``.with_*()`` transformation API.

Each transformation returns a new object. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, replace

from dsplay.http.cookies import SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """A complete, buffered HTTP response."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_cookie(self, cookie: SetCookie) -> Response:
        """Return a new Response carrying an additional ``Set-Cookie``."""
        return replace(self, cookies=(*self.cookies, cookie))

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def cookie(self, name: str) -> str | None:
        """Value of the last ``Set-Cookie`` named *name*, if any."""
        for cookie in reversed(self.cookies):
            if cookie.name == name:
                return cookie.value
        return None


@dataclass(frozen=True, slots=True)
class LiveResponse:
    """Sentinel response for a live-update stream.

    Wraps an async iterator of already-encoded server-sent events. The
    server writes the headers (and every cookie attached here) before the
    first event, after which the session can no longer change.
    """

    events: AsyncIterator[str]
    cookies: tuple[SetCookie, ...] = ()
    heartbeat_interval: float = 15.0

    def with_cookie(self, cookie: SetCookie) -> LiveResponse:
        return replace(self, cookies=(*self.cookies, cookie))
