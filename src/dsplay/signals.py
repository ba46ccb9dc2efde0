"""Signals: client- and server-originated state carried into templates.

A signal map is a string-keyed mapping of JSON-shaped values. Values are
checked on the way in (``coerce_signal``) so everything stored in a
``Signals`` map can be serialized for the bridge and merged without
surprises.

Live-update requests carry their signals either in the ``datastar``
query parameter (GET, DELETE, ...) or as a JSON request body (POST, PUT,
PATCH).
"""

from __future__ import annotations

import json as json_module
import logging
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from dsplay.http.request import Request

logger = logging.getLogger("dsplay.server")

type SignalValue = str | int | float | bool | None | list[SignalValue] | dict[str, SignalValue]

# Query parameter holding JSON signals on body-less methods
SIGNALS_QUERY_PARAM = "datastar"


def coerce_signal(value: Any) -> SignalValue:
    """Validate *value* as a signal value, copying containers.

    Raises:
        TypeError: If *value* (or anything nested in it) is not a string,
            number, bool, None, list, or string-keyed mapping.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return _coerce_mapping(value)
    if isinstance(value, (list, tuple)):
        return [coerce_signal(item) for item in value]
    msg = f"unsupported signal value type: {type(value).__name__}"
    raise TypeError(msg)


def _coerce_mapping(value: Mapping[Any, Any]) -> dict[str, SignalValue]:
    result: dict[str, SignalValue] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            msg = f"signal keys must be strings, got {key!r}"
            raise TypeError(msg)
        result[key] = coerce_signal(item)
    return result


class Signals(MutableMapping[str, SignalValue]):
    """String-keyed map of signal values.

    ``merge`` is the only bulk update: it overwrites keys present in the
    incoming payload and never removes existing ones.
    """

    __slots__ = ("_data",)

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, SignalValue] = {}
        if initial:
            self.merge(initial)

    def __getitem__(self, key: str) -> SignalValue:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = coerce_signal(value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Signals({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Signals):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def merge(self, incoming: Mapping[str, Any]) -> None:
        """Overwrite colliding keys with *incoming*; keep everything else."""
        if not isinstance(incoming, Mapping):
            msg = f"signals must be merged from a mapping, got {type(incoming).__name__}"
            raise TypeError(msg)
        self._data.update(_coerce_mapping(incoming))

    def to_dict(self) -> dict[str, SignalValue]:
        """Plain-dict copy for template contexts."""
        return dict(self._data)

    def to_json(self) -> bytes:
        return json_module.dumps(self._data, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_json(cls, payload: bytes | str) -> Signals:
        """Decode a JSON object payload.

        Raises:
            ValueError: If the payload is not a JSON object.
            TypeError: If a value cannot be held as a signal.
            RecursionError: If the payload is nested too deeply to decode.
        """
        data = json_module.loads(payload) if payload else {}
        if not isinstance(data, dict):
            msg = f"signals payload must be a JSON object, got {type(data).__name__}"
            raise ValueError(msg)
        return cls(data)

    @property
    def tab_id(self) -> str | None:
        """The ``tab_id`` signal when it is a nonempty string."""
        value = self._data.get("tab_id")
        if isinstance(value, str) and value:
            return value
        return None


async def read_signals(request: Request) -> Signals:
    """Extract signals from a live-update request.

    Failures are logged and yield an empty map; a bad payload never
    fails the request.
    """
    try:
        if request.has_body:
            return Signals.from_json(await request.body())
        raw = request.query.get(SIGNALS_QUERY_PARAM)
        if not raw:
            return Signals()
        return Signals.from_json(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        logger.warning("Failed to read signals for %s %s: %s", request.method, request.path, exc)
        return Signals()
