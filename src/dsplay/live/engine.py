"""Live-stream engine — one state machine per open connection.

::

    INIT ──► LOOP ─────────────────────────────► CLOSED
      │        (timer ticks + bridge messages)     ▲
      └────► SEQUENTIAL_DRAIN ──► IDLE_LISTEN ─────┘
              (delayed steps)      (bridge messages)

INIT picks the starting section and sends it. A route whose first
section loops with a positive interval enters LOOP: a repeating timer
walks the sections, either forever (``count: 0``) or file by file, each
file repeated ``count`` times before moving on. Any other route drains
its remaining sections with a delay between them and then idles, waiting
for bridge messages. Cancellation (client gone) closes the stream from
any state; so does a render failure, because the stream's headers are
already on the wire and no error response is possible.

Within one connection exactly one event (tick or bridge message) is
handled at a time.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable
from enum import StrEnum

from dsplay.bridge import Bridge, Inbox, subscribe_all, unsubscribe_all
from dsplay.counters import HitCounters
from dsplay.errors import TemplateRenderError
from dsplay.live.events import patch_elements
from dsplay.rendering import RenderContext, Renderer
from dsplay.routes.types import SectionEntry, group_bounds
from dsplay.sequencer import advance_position, current_position
from dsplay.session import SessionState
from dsplay.signals import Signals

logger = logging.getLogger("dsplay.live")

DEFAULT_DELAY_MS = 5000


class LiveState(StrEnum):
    INIT = "init"
    LOOP = "loop"
    SEQUENTIAL_DRAIN = "sequential_drain"
    IDLE_LISTEN = "idle_listen"
    CLOSED = "closed"


def start_position(sections: list[SectionEntry], state: SessionState, key: str) -> int:
    """Choose the first section of a stream and update the stored cursor.

    A timer-looping route resumes from the stored cursor. Any other route
    starts at 0 and, when it has several sections, advances the stored
    cursor now: this runs before the stream's headers are sent, the last
    point at which the session cookie can change.
    """
    length = len(sections)
    first = sections[0].options
    if first.ticking:
        return current_position(state, key, length)
    if length > 1:
        advance_position(state, key, length, loop=first.loop)
    return 0


class LiveStream:
    """Drive one live connection through its sections.

    ``events()`` is an async generator of encoded patch events; the SSE
    transport writes them and cancels the generator when the client
    disconnects.

    Usage::

        stream = LiveStream(sections, position, context, renderer=r,
                            counters=c, bridge=b, subjects=[...])
        async for chunk in stream.events():
            await send(chunk)
    """

    __slots__ = (
        "_bridge",
        "_counters",
        "_default_delay_ms",
        "_encode",
        "_renderer",
        "_subjects",
        "context",
        "position",
        "sections",
        "state",
    )

    def __init__(
        self,
        sections: list[SectionEntry],
        position: int,
        context: RenderContext,
        *,
        renderer: Renderer,
        counters: HitCounters,
        bridge: Bridge,
        subjects: list[str],
        default_delay_ms: int = DEFAULT_DELAY_MS,
        encode: Callable[[str], str] = patch_elements,
    ) -> None:
        self.sections = sections
        self.position = position
        self.context = context
        self.state = LiveState.INIT
        self._renderer = renderer
        self._counters = counters
        self._bridge = bridge
        self._subjects = subjects
        self._default_delay_ms = default_delay_ms
        self._encode = encode

    # -- Public --

    async def events(self) -> AsyncIterator[str]:
        """Yield encoded patches until the stream ends or is cancelled."""
        inbox = Inbox()
        subscriptions = subscribe_all(self._bridge, self._subjects, inbox)
        try:
            self.context.live_message_count = 1
            chunk = self._render_current()
            if chunk is not None:
                yield chunk

            if self.sections[0].options.ticking:
                self.state = LiveState.LOOP
                phase = self._loop(inbox)
            else:
                self.state = LiveState.SEQUENTIAL_DRAIN
                phase = self._drain_then_listen(inbox)

            async with contextlib.aclosing(phase) as chunks:
                async for chunk in chunks:
                    yield chunk
        except TemplateRenderError as exc:
            logger.error("Live render failed for %s, closing stream: %s", self.context.url, exc)
        finally:
            self.state = LiveState.CLOSED
            unsubscribe_all(subscriptions)

    # -- Phases --

    async def _loop(self, inbox: Inbox) -> AsyncIterator[str]:
        """LOOP: race the interval timer against bridge messages."""
        loop = asyncio.get_running_loop()
        options = self.sections[self.position].options
        interval = options.interval_ms / 1000
        count = options.count
        group_start, group_len = group_bounds(self.sections, self.position)
        group_ticks = self.position - group_start + 1
        deadline = loop.time() + interval

        pending: asyncio.Task[bytes] | None = None
        try:
            while True:
                if pending is None:
                    pending = asyncio.ensure_future(inbox.get())
                done, _ = await asyncio.wait({pending}, timeout=max(0.0, deadline - loop.time()))

                if done:
                    payload = pending.result()
                    pending = None
                    chunk = self._on_message(payload)
                    if chunk is not None:
                        yield chunk
                    continue

                deadline += interval
                if deadline <= loop.time():
                    # Missed ticks are dropped, not replayed
                    deadline = loop.time() + interval
                if count <= 0:
                    self.position = (self.position + 1) % len(self.sections)
                    chunk = self._tick()
                    if chunk is not None:
                        yield chunk
                    continue

                if group_ticks >= count * group_len:
                    next_start = group_start + group_len
                    if next_start >= len(self.sections):
                        return
                    group_start, group_len = group_bounds(self.sections, next_start)
                    options = self.sections[next_start].options
                    if not options.ticking:
                        # Final static step: show each section once, then close
                        for index in range(group_start, group_start + group_len):
                            self.position = index
                            chunk = self._tick()
                            if chunk is not None:
                                yield chunk
                        return
                    count = options.count
                    interval = options.interval_ms / 1000
                    deadline = loop.time() + interval
                    group_ticks = 0

                self.position = group_start + group_ticks % group_len
                group_ticks += 1
                chunk = self._tick()
                if chunk is not None:
                    yield chunk
        finally:
            if pending is not None:
                pending.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await pending

    async def _drain_then_listen(self, inbox: Inbox) -> AsyncIterator[str]:
        """SEQUENTIAL_DRAIN, then IDLE_LISTEN."""
        for index in range(1, len(self.sections)):
            delay_ms = self.sections[index].options.delay_ms or self._default_delay_ms
            await asyncio.sleep(delay_ms / 1000)
            self.position = index
            self.context.refresh_hits(self._counters)
            self.context.live_message_count += 1
            chunk = self._render_current()
            if chunk is not None:
                yield chunk

        self.state = LiveState.IDLE_LISTEN
        while True:
            payload = await inbox.get()
            chunk = self._on_message(payload)
            if chunk is not None:
                yield chunk

    # -- Events --

    def _tick(self) -> str | None:
        """Render the current position as a timer-driven step."""
        self.context.refresh_hits(self._counters)
        self.context.live_message_count += 1
        self.context.loop_iteration += 1
        return self._render_current()

    def _on_message(self, payload: bytes) -> str | None:
        """Merge a bridge payload into the signals and re-render in place."""
        try:
            incoming = Signals.from_json(payload)
        except (ValueError, TypeError, RecursionError) as exc:
            logger.warning("Ignoring malformed bridge message: %s", exc)
            return None
        self.context.signals.merge(incoming)
        self.context.refresh_hits(self._counters)
        self.context.live_message_count += 1
        return self._render_current()

    def _render_current(self) -> str | None:
        section = self.sections[self.position]
        if not section.body:
            return None
        return self._encode(self._renderer.render(section.body, self.context))
