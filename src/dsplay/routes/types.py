"""Data models for the playground route table.

Plain dataclasses built fresh by every scan. A table is owned by the
request that built it, so nothing here needs locking.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from dsplay.errors import FrontmatterError


class ResponseKind(StrEnum):
    """How a file answers: a plain HTML response or a live-update stream."""

    HTML = "html"
    LIVE = "live"


@dataclass(frozen=True, slots=True)
class Frontmatter:
    """Options block at the top of a template file.

    Attributes:
        loop: Wrap the section cursor instead of freezing on the last entry.
        interval_ms: Live streams only — milliseconds between loop ticks.
        count: Live streams only — passes over this file before moving on
            (``0`` loops forever).
        status_code: HTTP status for the HTML path (``0`` = default).
        delay_ms: Live streams only — pause before this file's sections
            while draining a non-looping sequence (``0`` = default delay).
    """

    loop: bool = False
    interval_ms: int = 0
    count: int = 0
    status_code: int = 0
    delay_ms: int = 0

    @property
    def ticking(self) -> bool:
        """True when a live stream should loop on a timer."""
        return self.loop and self.interval_ms > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Frontmatter:
        """Decode the YAML mapping. Unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            msg = f"frontmatter must be a mapping, got {type(data).__name__}"
            raise FrontmatterError(msg)
        return cls(
            loop=_bool_option(data, "loop"),
            interval_ms=_int_option(data, "interval"),
            count=_int_option(data, "count"),
            status_code=_int_option(data, "status"),
            delay_ms=_int_option(data, "delay"),
        )


def _bool_option(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        msg = f"{key!r} must be true or false, got {value!r}"
        raise FrontmatterError(msg)
    return value


def _int_option(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key, 0)
    if value is None:
        return 0
    # bool is an int subclass; "status: true" is a typo, not 1
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{key!r} must be an integer, got {value!r}"
        raise FrontmatterError(msg)
    return value


@dataclass(frozen=True, slots=True)
class ParsedFile:
    """One template file split into options and response sections."""

    options: Frontmatter
    sections: tuple[str, ...]
    path: str
    seq_index: int = -1


@dataclass(slots=True)
class RouteEntry:
    """All files for one URL path, keyed by method then response kind.

    The empty-string method key means "any method" and is the fallback
    when no method-specific list exists.
    """

    html: dict[str, list[ParsedFile]] = field(default_factory=dict)
    live: dict[str, list[ParsedFile]] = field(default_factory=dict)

    def files(self, kind: ResponseKind) -> dict[str, list[ParsedFile]]:
        return self.live if kind is ResponseKind.LIVE else self.html

    def add(self, kind: ResponseKind, method: str, parsed: ParsedFile) -> None:
        self.files(kind).setdefault(method, []).append(parsed)

    def lookup(self, kind: ResponseKind, method: str) -> list[ParsedFile]:
        """Files for *method*, falling back to the any-method list."""
        by_method = self.files(kind)
        exact = by_method.get(method.upper())
        if exact:
            return exact
        return by_method.get("", [])

    def lookup_html(self, method: str) -> list[ParsedFile]:
        return self.lookup(ResponseKind.HTML, method)

    def lookup_live(self, method: str) -> list[ParsedFile]:
        return self.lookup(ResponseKind.LIVE, method)


type RouteTable = dict[str, RouteEntry]


@dataclass(frozen=True, slots=True)
class SectionEntry:
    """One section of one file, flattened into a route's sequence.

    ``owner`` is the index of the source file in the selected file list;
    consecutive entries with the same owner form a loop group.
    """

    body: str
    options: Frontmatter
    owner: int


def collect_sections(files: list[ParsedFile]) -> list[SectionEntry]:
    """Flatten *files* into one sequence: file order, then in-file order."""
    entries = [
        SectionEntry(body=body, options=parsed.options, owner=owner)
        for owner, parsed in enumerate(files)
        for body in parsed.sections
    ]
    if not entries:
        entries.append(SectionEntry(body="", options=Frontmatter(), owner=0))
    return entries


def group_bounds(sections: list[SectionEntry], position: int) -> tuple[int, int]:
    """Return ``(start, length)`` of the owner-file run containing *position*."""
    owner = sections[position].owner
    start = position
    while start > 0 and sections[start - 1].owner == owner:
        start -= 1
    end = position + 1
    while end < len(sections) and sections[end].owner == owner:
        end += 1
    return start, end - start
