"""Section cursors: which section of a route a visitor sees next.

Cursors live in ``SessionState.seq_positions`` under a composite key so
the HTML and live-stream sequences of one route never share a position.
"""

from dsplay.routes.types import ResponseKind
from dsplay.session import SessionState


def sequence_key(url_path: str, kind: ResponseKind, method: str) -> str:
    """``"<url>:<kind>:<method>"``, e.g. ``"/counter/:html:GET"``."""
    return f"{url_path}:{kind.value}:{method.upper()}"


def clamp_position(position: int, length: int) -> int:
    """Clamp *position* into ``[0, length - 1]``."""
    return max(0, min(position, length - 1))


def next_position(position: int, length: int, *, loop: bool) -> int:
    """Cursor after *position*: wraps when looping, freezes on the last entry otherwise."""
    if loop:
        return (position + 1) % length
    return min(position + 1, length - 1)


def current_position(state: SessionState, key: str, length: int) -> int:
    """Stored cursor for *key* (default 0), clamped to the sequence."""
    return clamp_position(state.seq_positions.get(key, 0), length)


def advance_position(state: SessionState, key: str, length: int, *, loop: bool) -> int:
    """Move the stored cursor for *key* one step forward and return it.

    The caller is responsible for persisting *state* before the response
    headers are sent.
    """
    position = next_position(current_position(state, key, length), length, loop=loop)
    state.seq_positions[key] = position
    return position
