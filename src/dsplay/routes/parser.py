"""Template file parsing: YAML frontmatter plus ``===``-separated sections.

A template file looks like::

    ---
    loop: true
    status: 201
    ---
    <p>first response</p>
    ===
    <p>second response</p>

Empty sections are kept: an empty section is an intentionally empty
response (204 on the HTML path, no patch on a live stream).
"""

import re
from pathlib import Path

import yaml

from dsplay.errors import FrontmatterError
from dsplay.routes.types import Frontmatter, ParsedFile

FRONTMATTER_DELIMITER = "---"
SECTION_DELIMITER = "==="

_FRONTMATTER_CLOSE_RE = re.compile(rf"^{re.escape(FRONTMATTER_DELIMITER)}[ \t]*$", re.MULTILINE)
_SECTION_SPLIT_RE = re.compile(rf"^{re.escape(SECTION_DELIMITER)}[ \t]*$", re.MULTILINE)


def parse_content(content: str) -> tuple[Frontmatter, tuple[str, ...]]:
    """Split raw template text into options and trimmed sections.

    Raises:
        FrontmatterError: If the options block is not valid YAML or holds
            values of the wrong type.
    """
    text = content.replace("\r\n", "\n")
    options = Frontmatter()

    trimmed = text.strip()
    first_line, _, rest = trimmed.partition("\n")
    if first_line.rstrip() == FRONTMATTER_DELIMITER:
        close = _FRONTMATTER_CLOSE_RE.search(rest)
        if close is not None:
            options = _load_frontmatter(rest[: close.start()])
            text = rest[close.end() :]

    sections = tuple(part.strip() for part in _SECTION_SPLIT_RE.split(text))
    return options, sections or ("",)


def _load_frontmatter(block: str) -> Frontmatter:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        msg = f"invalid frontmatter: {exc}"
        raise FrontmatterError(msg) from exc
    return Frontmatter.from_mapping(data)


def parse_file(path: str | Path, seq_index: int = -1) -> ParsedFile:
    """Read and parse one template file from disk.

    Raises:
        OSError: If the file cannot be read.
        FrontmatterError: If the options block is malformed.
    """
    content = Path(path).read_text(encoding="utf-8")
    options, sections = parse_content(content)
    return ParsedFile(options=options, sections=sections, path=str(path), seq_index=seq_index)
