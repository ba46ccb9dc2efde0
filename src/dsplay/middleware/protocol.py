"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> AnyResponse: ...

Both ``Response`` and ``LiveResponse`` expose ``.with_cookie()``, so
middleware can attach cookies to either without checking. Only a
``Response`` takes extra headers; a live stream's headers are fixed by
the transport.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from dsplay.http.request import Request
from dsplay.http.response import LiveResponse, Response

type AnyResponse = Response | LiveResponse

type Next = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
