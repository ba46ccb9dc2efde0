"""ASGI handler and the per-request dispatch pipeline.

``handle_request`` is the only component that touches raw ASGI for HTTP
requests: it builds a ``Request``, runs the middleware chain around a
``Dispatcher``, maps errors to responses, and hands the result to the
buffered sender or the live-stream transport.

Dispatch, per request::

    normalize path -> scan -> route? -> signals (live-update only)
        -> session -> counters -> live list? -> LiveStream
                                 -> html list? -> sequenced section
                                 -> 404
"""

from collections.abc import Callable
from typing import Any

from dsplay._internal.asgi import Receive, Scope, Send
from dsplay.bridge import Bridge, publish_signals, session_subject, tab_subject
from dsplay.config import PlaygroundConfig
from dsplay.counters import HitCounters
from dsplay.errors import HTTPError, NotFound, ScanError, TemplateRenderError
from dsplay.http.request import Request
from dsplay.http.response import LiveResponse, Response
from dsplay.live.engine import LiveStream, start_position
from dsplay.live.sse import handle_sse
from dsplay.middleware.protocol import AnyResponse, Next
from dsplay.rendering import RenderContext, Renderer
from dsplay.routes.scanner import scan_playground
from dsplay.routes.types import ParsedFile, ResponseKind, collect_sections
from dsplay.sequencer import advance_position, current_position, sequence_key
from dsplay.server.errors import (
    handle_http_error,
    handle_internal_error,
    scan_error_response,
    template_error_response,
)
from dsplay.server.sender import send_response
from dsplay.session import SessionState, SessionStore
from dsplay.signals import Signals, read_signals


def normalize_path(path: str) -> str:
    """Route key for a request path: always ``/``-suffixed."""
    if not path:
        return "/"
    return path if path.endswith("/") else path + "/"


class Dispatcher:
    """Innermost handler: turns a request into a playground response.

    The route table is rebuilt from disk on every request, so edits to
    the playground show up on the next reload.
    """

    __slots__ = ("_bridge", "_config", "_counters", "_renderer", "_store")

    def __init__(
        self,
        config: PlaygroundConfig,
        *,
        counters: HitCounters,
        store: SessionStore,
        renderer: Renderer,
        bridge: Bridge,
    ) -> None:
        self._config = config
        self._counters = counters
        self._store = store
        self._renderer = renderer
        self._bridge = bridge

    async def __call__(self, request: Request) -> AnyResponse:
        config = self._config
        url_path = normalize_path(request.path)

        try:
            routes = scan_playground(
                config.playground_dir,
                extension=config.template_extension,
                strict=config.strict_scan,
            )
        except ScanError as exc:
            return scan_error_response(exc)

        entry = routes.get(url_path)
        if entry is None:
            raise NotFound

        is_live_update = request.is_live_update(config.live_header)
        signals = await read_signals(request) if is_live_update else Signals()

        state = self._store.get_or_create(request)
        global_hits, url_hits = self._counters.hit(url_path)
        session_url_hits = state.hit(url_path)

        context = RenderContext(
            url=url_path,
            method=request.method,
            username=state.username,
            session_id=state.session_id,
            global_hits=global_hits,
            url_hits=url_hits,
            session_url_hits=session_url_hits,
            signals=signals,
        )

        if is_live_update:
            live_files = entry.lookup_live(request.method)
            if live_files:
                return self._live(live_files, state, context)

        html_files = entry.lookup_html(request.method)
        if not html_files:
            raise NotFound
        return self._html(html_files, state, context, publish=is_live_update)

    def _html(
        self,
        files: list[ParsedFile],
        state: SessionState,
        context: RenderContext,
        *,
        publish: bool,
    ) -> Response:
        sections = collect_sections(files)
        key = sequence_key(context.url, ResponseKind.HTML, context.method)
        position = current_position(state, key, len(sections))
        section = sections[position]
        if len(sections) > 1:
            advance_position(state, key, len(sections), loop=section.options.loop)

        if publish and context.signals:
            publish_signals(
                self._bridge, self._config.bridge_namespace, state.session_id, context.signals
            )

        status = section.options.status_code
        if not section.body:
            response = Response(status=status or 204)
        else:
            try:
                body = self._renderer.render(section.body, context)
            except TemplateRenderError as exc:
                return template_error_response(exc, context.url, context.method)
            response = Response(body=body, status=status or 200)
        return self._store.attach(response, state)

    def _live(
        self,
        files: list[ParsedFile],
        state: SessionState,
        context: RenderContext,
    ) -> LiveResponse:
        sections = collect_sections(files)
        key = sequence_key(context.url, ResponseKind.LIVE, context.method)
        position = start_position(sections, state, key)

        namespace = self._config.bridge_namespace
        subjects = [session_subject(namespace, state.session_id)]
        if context.signals.tab_id is not None:
            subjects.append(tab_subject(namespace, context.signals.tab_id))

        stream = LiveStream(
            sections,
            position,
            context,
            renderer=self._renderer,
            counters=self._counters,
            bridge=self._bridge,
            subjects=subjects,
            default_delay_ms=self._config.default_delay_ms,
        )
        response = LiveResponse(
            events=stream.events(),
            heartbeat_interval=self._config.sse_heartbeat_interval,
        )
        return self._store.attach(response, state)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Callable[[Request], Any],
    middleware: tuple[Callable[..., Any], ...],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    handler: Next = dispatcher
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> AnyResponse:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    if isinstance(response, LiveResponse):
        await handle_sse(response, send, receive)
    else:
        await send_response(response, send)
