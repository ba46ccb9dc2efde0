"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from dsplay._internal.asgi import Receive, Scope
from dsplay.http.cookies import parse_cookies

# Methods whose live-update signals travel in the request body
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class Headers(Mapping[str, str]):
    """Case-insensitive, read-only view over ASGI header pairs.

    Lookups return the first value for a repeated header.
    """

    __slots__ = ("_index",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        index: dict[str, list[str]] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._index = index

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query, cookies) is frozen at creation.
    The body is read once through ``body()`` and cached.
    """

    method: str
    path: str
    headers: Headers
    query: Mapping[str, str]
    cookies: Mapping[str, str]
    client: tuple[str, int] | None

    # ASGI receive callable for body streaming
    _receive: Receive

    # Mutable cache for the body (the dict is mutable, the field is not)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def is_live_update(self, header: str) -> bool:
        """True when *header* is present with a nonempty value."""
        return bool(self.headers.get(header))

    @property
    def has_body(self) -> bool:
        """Whether live-update signals for this method come from the body."""
        return self.method in BODY_METHODS

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "_body" not in self._cache:
            self._cache["_body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["_body"]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks until the client signals the end."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Build a Request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        query_string = scope.get("query_string", b"").decode("latin-1")
        query: dict[str, str] = {}
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            query.setdefault(key, value)
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=query,
            cookies=parse_cookies(headers.get("cookie", "")),
            client=tuple(client) if client else None,
            _receive=receive,
        )
