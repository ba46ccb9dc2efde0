"""Per-visitor session state carried in a signed cookie.

The state is an explicit, versioned record serialized as JSON and signed
with ``itsdangerous``. A cookie that fails verification, has expired, or
carries an unknown schema version is discarded and a fresh session is
issued; the visitor never sees an error.

Every response re-attaches the cookie, so the TTL slides with activity.
On the live-stream path the cookie is attached before the stream's
headers are sent, which is the last moment the session can change.
"""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, field
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from dsplay.errors import ConfigurationError, SessionDecodeError
from dsplay.http.cookies import SetCookie
from dsplay.http.request import Request
from dsplay.http.response import LiveResponse, Response

SCHEMA_VERSION = 1

_ADJECTIVES = (
    "swift", "clever", "brave", "calm", "eager",
    "bold", "bright", "cool", "daring", "fancy",
    "gentle", "happy", "jolly", "keen", "lively",
    "merry", "noble", "proud", "quick", "sharp",
    "witty", "zesty", "vivid", "steady", "silent",
)  # fmt: skip

_NOUNS = (
    "fox", "owl", "hawk", "bear", "wolf",
    "deer", "hare", "lynx", "crow", "wren",
    "otter", "finch", "pike", "moth", "newt",
    "crane", "dove", "seal", "toad", "vole",
    "raven", "stoat", "shrew", "robin", "swift",
)  # fmt: skip


def random_username() -> str:
    """A readable handle such as ``"keen-otter-42"``."""
    return f"{random.choice(_ADJECTIVES)}-{random.choice(_NOUNS)}-{random.randrange(100)}"


def new_session_id() -> str:
    return f"s-{secrets.token_urlsafe(16)}"


@dataclass(slots=True)
class SessionState:
    """Everything remembered about one visitor.

    Attributes:
        username: Random display name, stable for the session.
        session_id: Bridge subject key for this visitor, drawn independently
            of the username.
        url_hits: Per-URL request count for this visitor.
        seq_positions: Section cursor per ``"<url>:<kind>:<method>"`` key.
    """

    username: str = field(default_factory=random_username)
    session_id: str = field(default_factory=new_session_id)
    url_hits: dict[str, int] = field(default_factory=dict)
    seq_positions: dict[str, int] = field(default_factory=dict)

    def hit(self, url_path: str) -> int:
        """Count one request to *url_path*; return the new count."""
        self.url_hits[url_path] = self.url_hits.get(url_path, 0) + 1
        return self.url_hits[url_path]

    def to_dict(self) -> dict[str, Any]:
        return {
            "v": SCHEMA_VERSION,
            "username": self.username,
            "session_id": self.session_id,
            "url_hits": dict(self.url_hits),
            "seq_pos": dict(self.seq_positions),
        }

    @classmethod
    def from_dict(cls, data: Any) -> SessionState:
        """Rebuild a state from its serialized form.

        Raises:
            SessionDecodeError: On a wrong schema version or malformed fields.
        """
        if not isinstance(data, dict):
            msg = "session payload is not an object"
            raise SessionDecodeError(msg)
        if data.get("v") != SCHEMA_VERSION:
            msg = f"unsupported session schema version: {data.get('v')!r}"
            raise SessionDecodeError(msg)
        username = data.get("username")
        session_id = data.get("session_id")
        if not isinstance(session_id, str) or not session_id:
            session_id = new_session_id()
        return cls(
            username=username if isinstance(username, str) and username else random_username(),
            session_id=session_id,
            url_hits=_int_map(data.get("url_hits")),
            seq_positions=_int_map(data.get("seq_pos")),
        )


def _int_map(value: Any) -> dict[str, int]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = "session counters must be objects"
        raise SessionDecodeError(msg)
    result: dict[str, int] = {}
    for key, count in value.items():
        if not isinstance(key, str) or isinstance(count, bool) or not isinstance(count, int):
            msg = f"malformed session counter {key!r}: {count!r}"
            raise SessionDecodeError(msg)
        result[key] = count
    return result


class SessionStore:
    """Signed-cookie persistence for ``SessionState``.

    Usage::

        store = SessionStore("secret", cookie_name="ds-play", max_age=3600)
        state = store.get_or_create(request)
        state.hit("/counter/")
        response = store.attach(response, state)
    """

    __slots__ = ("_cookie_name", "_max_age", "_serializer")

    def __init__(
        self,
        secret_key: str,
        *,
        cookie_name: str = "ds-play",
        max_age: int = 3600,
    ) -> None:
        if not secret_key:
            msg = "secret_key must not be empty."
            raise ConfigurationError(msg)
        self._serializer = URLSafeTimedSerializer(secret_key, salt="dsplay-session")
        self._cookie_name = cookie_name
        self._max_age = max_age

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def new(self) -> SessionState:
        return SessionState()

    def load(self, request: Request) -> SessionState | None:
        """Decode the session cookie, or return None when there is none.

        Raises:
            SessionDecodeError: If the cookie is present but invalid or expired.
        """
        cookie_value = request.cookies.get(self._cookie_name)
        if not cookie_value:
            return None
        return self.decode_cookie(cookie_value)

    def get_or_create(self, request: Request) -> SessionState:
        """Return the request's session, or a fresh one when missing or unreadable."""
        try:
            state = self.load(request)
        except SessionDecodeError:
            state = None
        return state if state is not None else self.new()

    def cookie(self, state: SessionState) -> SetCookie:
        return SetCookie(
            name=self._cookie_name,
            value=self._serializer.dumps(state.to_dict()),
            max_age=self._max_age,
        )

    def attach(
        self, response: Response | LiveResponse, state: SessionState
    ) -> Response | LiveResponse:
        """Return *response* carrying the serialized *state*."""
        return response.with_cookie(self.cookie(state))

    def decode_cookie(self, value: str) -> SessionState:
        """Decode a raw cookie value (used by tests and tooling).

        Raises:
            SessionDecodeError: If the value is invalid or expired.
        """
        try:
            data = self._serializer.loads(value, max_age=self._max_age)
        except BadData as exc:
            msg = f"session cookie rejected: {exc}"
            raise SessionDecodeError(msg) from exc
        return SessionState.from_dict(data)
