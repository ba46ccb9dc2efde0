"""Section rendering with kida.

Sections are inline templates: each one is compiled from its source text
(cached by source) and rendered against a ``RenderContext``. Template
authors see these names::

    {{ global_hits }}        requests served by this process
    {{ url_hits }}           requests to this URL, all visitors
    {{ session_url_hits }}   requests to this URL, this visitor
    {{ username }}           random name for this visitor
    {{ session_id }}         bridge key for this visitor
    {{ url }} {{ method }}   the request
    {{ signals }}            live-update signals (merged from the bridge)
    {{ live_message_count }} patches sent on this stream so far
    {{ loop_iteration }}     timer ticks on this stream so far
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from kida import Environment

from dsplay.counters import HitCounters
from dsplay.errors import TemplateRenderError
from dsplay.signals import Signals

# Compiled templates kept per Renderer
_CACHE_SIZE = 256


@dataclass(slots=True)
class RenderContext:
    """Everything a section can reference. Rebuilt for each render."""

    url: str
    method: str
    username: str
    session_id: str
    global_hits: int = 0
    url_hits: int = 0
    session_url_hits: int = 0
    signals: Signals = field(default_factory=Signals)
    live_message_count: int = 0
    loop_iteration: int = 0

    def refresh_hits(self, counters: HitCounters) -> None:
        """Pick up requests served since the stream started."""
        self.global_hits = counters.global_hits
        self.url_hits = counters.url_hits(self.url)

    def as_template_context(self) -> dict[str, Any]:
        return {
            "global_hits": self.global_hits,
            "url_hits": self.url_hits,
            "session_url_hits": self.session_url_hits,
            "username": self.username,
            "session_id": self.session_id,
            "url": self.url,
            "method": self.method,
            "signals": self.signals.to_dict(),
            "live_message_count": self.live_message_count,
            "loop_iteration": self.loop_iteration,
        }


def create_environment(*, autoescape: bool = True) -> Environment:
    """Create the kida environment shared by every render."""
    return Environment(autoescape=autoescape)


class Renderer:
    """Compile-and-render for section bodies.

    Thread safety:
        The compiled-template cache is guarded by a Lock; rendering itself
        runs outside the lock.
    """

    __slots__ = ("_cache", "_env", "_lock")

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env or create_environment()
        self._cache: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def _compile(self, source: str) -> Any:
        with self._lock:
            template = self._cache.get(source)
            if template is not None:
                self._cache.move_to_end(source)
                return template
        template = self._env.from_string(source)
        with self._lock:
            self._cache[source] = template
            while len(self._cache) > _CACHE_SIZE:
                self._cache.popitem(last=False)
        return template

    def render(self, source: str, context: RenderContext) -> str:
        """Render *source* against *context*.

        Raises:
            TemplateRenderError: If the section fails to compile or render.
        """
        try:
            return self._compile(source).render(context.as_template_context())
        except Exception as exc:
            raise TemplateRenderError(exc) from exc
