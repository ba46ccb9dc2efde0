"""Playground — the ASGI application.

Owns the process-wide state every request shares: hit counters, the
session store, the template renderer, and the signal bridge. Everything
else (the route table included) is rebuilt per request.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from dsplay._internal.asgi import Receive, Scope, Send
from dsplay.bridge import Bridge, SubjectBus
from dsplay.config import PlaygroundConfig
from dsplay.counters import HitCounters
from dsplay.errors import ConfigurationError, ScanError
from dsplay.middleware.access_log import RequestLogger
from dsplay.middleware.protocol import Middleware
from dsplay.middleware.static import StaticFiles
from dsplay.rendering import Renderer
from dsplay.routes.scanner import describe_routes, scan_playground
from dsplay.server.handler import Dispatcher, handle_request
from dsplay.session import SessionStore

logger = logging.getLogger("dsplay.server")


class Playground:
    """Serve a directory of templates as an interactive playground.

    Usage::

        app = Playground(PlaygroundConfig(playground_dir="./demo", debug=True))
        app.run()

    ``Playground`` is a plain ASGI callable, so any ASGI server can host
    it as well. A custom ``bridge`` (anything with ``publish`` and ``subscribe``)
    replaces the in-process ``SubjectBus``; the playground only closes
    bridges it created itself.

    Thread safety:
        Middleware are collected until the first request or lifespan
        startup, then frozen into a tuple. The freeze uses a Lock with a
        double check so exactly one thread builds the pipeline.
    """

    __slots__ = (
        "_bridge",
        "_counters",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_owns_bridge",
        "_renderer",
        "_store",
        "config",
    )

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        *,
        bridge: Bridge | None = None,
    ) -> None:
        self.config: PlaygroundConfig = config or PlaygroundConfig()
        _validate(self.config)

        self._counters = HitCounters()
        self._store = SessionStore(
            self.config.secret_key,
            cookie_name=self.config.session_cookie,
            max_age=self.config.session_max_age,
        )
        self._renderer = Renderer()
        self._owns_bridge = bridge is None
        self._bridge: Bridge = bridge if bridge is not None else SubjectBus()
        self._dispatcher = Dispatcher(
            self.config,
            counters=self._counters,
            store=self._store,
            renderer=self._renderer,
            bridge=self._bridge,
        )

        self._middleware_list: list[Middleware] = []
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Public --

    @property
    def bridge(self) -> Bridge:
        return self._bridge

    @property
    def counters(self) -> HitCounters:
        return self._counters

    @property
    def sessions(self) -> SessionStore:
        return self._store

    def add_middleware(self, middleware: Middleware) -> None:
        """Wrap the dispatcher; runs inside the built-in logging and static layers."""
        if self._frozen:
            msg = "Cannot add middleware after the playground has started serving."
            raise RuntimeError(msg)
        self._middleware_list.append(middleware)

    def routes(self) -> list[str]:
        """Human-readable route table for the current playground tree.

        Raises:
            ScanError: If the tree cannot be scanned.
        """
        table = scan_playground(
            self.config.playground_dir,
            extension=self.config.template_extension,
            strict=self.config.strict_scan,
        )
        return describe_routes(table)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve on pounce (``pip install dsplay[server]``)."""
        from dsplay.server.dev import run_server

        self._ensure_frozen()
        run_server(self, host or self.config.host, port or self.config.port)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self._dispatcher,
            middleware=self._middleware,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                self.startup()
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    def startup(self) -> None:
        """Freeze the pipeline; in debug mode, log the route table."""
        self._ensure_frozen()
        if self.config.debug:
            self._dump_routes()

    def shutdown(self) -> None:
        """Close the bridge if this playground created it.

        Closing refuses new subscriptions; open streams end when their
        clients disconnect.
        """
        if self._owns_bridge and isinstance(self._bridge, SubjectBus):
            self._bridge.close()

    # -- Internal --

    def _dump_routes(self) -> None:
        try:
            lines = self.routes()
        except ScanError as exc:
            logger.warning("Could not scan playground at startup: %s", exc)
            return
        logger.info("Playground routes in %s:", self.config.playground_dir)
        for line in lines:
            logger.info("  %s", line)

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the middleware chain. MUST only be called under _freeze_lock."""
        built_in: list[Middleware] = [RequestLogger(self.config.live_header)]
        if self.config.static_dir.is_dir():
            built_in.append(StaticFiles(self.config.static_dir, prefix=self.config.static_prefix))
        self._middleware = tuple([*built_in, *self._middleware_list])
        self._frozen = True


def _validate(config: PlaygroundConfig) -> None:
    if not config.secret_key:
        msg = "secret_key must not be empty."
        raise ConfigurationError(msg)
    if not Path(config.playground_dir).is_dir():
        msg = f"Playground directory not found: {config.playground_dir}"
        raise ConfigurationError(msg)
    if not config.template_extension.startswith("."):
        msg = f"template_extension must start with '.', got {config.template_extension!r}"
        raise ConfigurationError(msg)
    if config.default_delay_ms < 0:
        msg = "default_delay_ms must not be negative."
        raise ConfigurationError(msg)
