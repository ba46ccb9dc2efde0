"""Route table: filename conventions, template parsing, directory scanning."""

from dsplay.routes.classify import classify_file, extract_seq_index
from dsplay.routes.parser import parse_content, parse_file
from dsplay.routes.scanner import describe_routes, scan_playground
from dsplay.routes.types import (
    Frontmatter,
    ParsedFile,
    ResponseKind,
    RouteEntry,
    RouteTable,
    SectionEntry,
    collect_sections,
)

__all__ = [
    "Frontmatter",
    "ParsedFile",
    "ResponseKind",
    "RouteEntry",
    "RouteTable",
    "SectionEntry",
    "classify_file",
    "collect_sections",
    "describe_routes",
    "extract_seq_index",
    "parse_content",
    "parse_file",
    "scan_playground",
]
