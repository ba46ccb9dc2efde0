"""Server-Sent Event encoding and the "patch elements" primitive.

Live streams speak Datastar's SSE dialect: each rendered fragment is
sent as a ``datastar-patch-elements`` event whose data lines are
prefixed with ``elements``. The browser morphs the fragment into the
page by element id.
"""

import re
from dataclasses import dataclass

PATCH_ELEMENTS_EVENT = "datastar-patch-elements"

# Only the line endings SSE itself recognizes
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True, slots=True)
class SSEEvent:
    """A single Server-Sent Event."""

    data: str
    event: str | None = None
    id: str | None = None
    retry: int | None = None

    def encode(self) -> str:
        """Serialize to SSE wire format (terminated by a blank line)."""
        lines: list[str] = []
        if self.event:
            lines.append(f"event: {self.event}")
        if self.id:
            lines.append(f"id: {self.id}")
        if self.retry is not None:
            lines.append(f"retry: {self.retry}")
        lines.extend(f"data: {line}" for line in self.data.split("\n"))
        return "\n".join(lines) + "\n\n"


def patch_elements(html: str) -> str:
    """Encode rendered *html* as one patch event."""
    lines = _LINE_BREAK.split(html)
    if len(lines) > 1 and not lines[-1]:
        lines.pop()
    data = "\n".join(f"elements {line}" for line in lines)
    return SSEEvent(data=data, event=PATCH_ELEMENTS_EVENT).encode()


def elements_of(event: SSEEvent) -> str:
    """Recover the HTML carried by a decoded patch event."""
    return "\n".join(line.removeprefix("elements ") for line in event.data.split("\n"))
