"""Live-stream testing utilities.

Parses the raw server-sent-event text a live stream produced into
structured events, and exposes the HTML each patch carried.
"""

import contextlib
from dataclasses import dataclass, field

from dsplay.live.events import PATCH_ELEMENTS_EVENT, SSEEvent, elements_of


@dataclass(frozen=True, slots=True)
class LiveTestResult:
    """Collected events from a live stream.

    Returned by ``TestClient.live()`` after the connection closes.
    """

    events: tuple[SSEEvent, ...]
    heartbeats: int
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    cookies: tuple[str, ...] = ()

    @property
    def patches(self) -> list[str]:
        """HTML of every patch event, in order."""
        return [elements_of(event) for event in self.events if event.event == PATCH_ELEMENTS_EVENT]


def parse_sse_frames(raw: str) -> tuple[list[SSEEvent], int]:
    """Parse raw SSE text into structured events and a heartbeat count.

    Blocks are separated by blank lines. Each line is a ``field: value``
    pair (one optional space after the colon); unknown fields are ignored.
    Comment-only blocks mentioning "heartbeat" are counted, not returned.
    """
    events: list[SSEEvent] = []
    heartbeats = 0

    for block in raw.replace("\r\n", "\n").split("\n\n"):
        lines = [line for line in block.split("\n") if line]
        if not lines:
            continue
        if all(line.startswith(":") for line in lines):
            heartbeats += sum("heartbeat" in line for line in lines)
            continue

        fields: dict[str, str] = {}
        data_lines: list[str] = []
        for line in lines:
            name, _, value = line.partition(":")
            value = value.removeprefix(" ")
            if name == "data":
                data_lines.append(value)
            elif name in ("event", "id", "retry"):
                fields[name] = value

        if not data_lines:
            continue
        retry: int | None = None
        with contextlib.suppress(KeyError, ValueError):
            retry = int(fields["retry"])
        events.append(
            SSEEvent(
                data="\n".join(data_lines),
                event=fields.get("event"),
                id=fields.get("id"),
                retry=retry,
            )
        )

    return events, heartbeats
