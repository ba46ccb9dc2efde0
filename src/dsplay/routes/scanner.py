"""Filesystem route discovery for a playground directory.

Every directory is a URL and every template file inside it is a handler
for that URL::

    playground/
        index.html            GET|POST|... /
        counter/
            index.html        any method   /counter/
            post.html         POST         /counter/
            live.html         live stream  /counter/
            step_001.html     sequence 1   /counter/

The table is rebuilt on every request, so edits on disk show up on the
next reload without any cache to invalidate.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dsplay.errors import FrontmatterError, ScanError
from dsplay.routes.classify import classify_file
from dsplay.routes.parser import parse_file
from dsplay.routes.types import ResponseKind, RouteEntry, RouteTable

logger = logging.getLogger("dsplay.routes")


def url_path_for(relative_dir: Path) -> str:
    """URL path for a directory relative to the playground root."""
    parts = [part for part in relative_dir.parts if part not in ("", ".")]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def scan_playground(
    root: str | Path,
    *,
    extension: str = ".html",
    strict: bool = True,
) -> RouteTable:
    """Walk *root* and build the route table.

    Args:
        root: Playground directory.
        extension: Suffix that marks a template file.
        strict: When True, the first unreadable or unparseable file aborts
            the whole scan. When False, such files are logged and skipped.

    Raises:
        ScanError: If *root* is not a directory, or (strict mode) a
            template file cannot be read or parsed.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise ScanError(root_path, FileNotFoundError("playground directory not found"))

    routes: RouteTable = {}
    _walk_directory(root_path, root_path, routes, extension=extension, strict=strict)

    # Stable: files sharing a sequence index keep walk order
    for entry in routes.values():
        for by_method in (entry.html, entry.live):
            for files in by_method.values():
                files.sort(key=lambda parsed: parsed.seq_index)
    return routes


def _walk_directory(
    directory: Path,
    root: Path,
    routes: RouteTable,
    *,
    extension: str,
    strict: bool,
) -> None:
    try:
        children = sorted(directory.iterdir())
    except OSError as exc:
        raise ScanError(directory, exc) from exc

    for item in children:
        if item.name.startswith("."):
            continue
        if item.is_dir():
            _walk_directory(item, root, routes, extension=extension, strict=strict)
            continue
        if not item.is_file() or item.suffix != extension:
            continue

        method, is_live, seq_index = classify_file(item.stem)
        try:
            parsed = parse_file(item, seq_index)
        except (OSError, UnicodeDecodeError, FrontmatterError) as exc:
            if strict:
                raise ScanError(item, exc) from exc
            logger.warning("Skipping %s: %s", item, exc)
            continue

        url_path = url_path_for(item.parent.relative_to(root))
        kind = ResponseKind.LIVE if is_live else ResponseKind.HTML
        routes.setdefault(url_path, RouteEntry()).add(kind, method, parsed)


def describe_routes(routes: RouteTable) -> list[str]:
    """One human-readable line per file, sorted by URL path.

    Used by the startup debug dump and ``dsplay routes``.
    """
    lines: list[str] = []
    for url_path in sorted(routes):
        entry = routes[url_path]
        for kind in ResponseKind:
            for method, files in sorted(entry.files(kind).items()):
                label = method or "*"
                for parsed in files:
                    lines.append(
                        f"{label:<6} {url_path} -> {kind.value.upper():<4} {parsed.path} "
                        f"(sections={len(parsed.sections)}, seq={parsed.seq_index})"
                    )
    return lines
