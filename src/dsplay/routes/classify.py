"""Filename conventions: what a template file answers and when.

Well-known stems within a directory (extension already removed)::

    index           HTML, any method
    live            live stream, any method
    get             HTML, GET
    post            HTML, POST
    post_live       live stream, POST
    live_001        live stream, any method, sequence 1
    post_live_001   live stream, POST, sequence 1
    post_001        HTML, POST, sequence 1
    index_001       HTML, any method, sequence 1

Anything unrecognised falls back to "HTML, any method". Classification
never fails.
"""

# HTTP method names recognised as stems
HTTP_METHODS = frozenset({"get", "post", "put", "patch", "delete"})

# Stem spellings that mark a live-update file ("sse" is the legacy name)
_LIVE_MARKERS = ("live", "sse")


def extract_seq_index(stem: str) -> tuple[str, int]:
    """Split a trailing ``_NNN`` sequence suffix off *stem*.

    Returns the remaining stem and the index, or ``(stem, -1)`` when the
    part after the last underscore is not a non-negative integer::

        >>> extract_seq_index("step_003")
        ('step', 3)
        >>> extract_seq_index("index")
        ('index', -1)
    """
    base, sep, suffix = stem.rpartition("_")
    if sep and suffix.isascii() and suffix.isdigit():
        return base, int(suffix)
    return stem, -1


def classify_file(stem: str) -> tuple[str, bool, int]:
    """Classify a filename stem as ``(method, is_live, seq_index)``.

    *method* is an uppercase HTTP method or ``""`` for "any method";
    *is_live* marks a live-update stream file.
    """
    remaining, seq_index = extract_seq_index(stem)
    is_live = False

    lowered = remaining.lower()
    if lowered in _LIVE_MARKERS:
        return "", True, seq_index
    for marker in _LIVE_MARKERS:
        suffix = "_" + marker
        if lowered.endswith(suffix):
            is_live = True
            lowered = lowered[: -len(suffix)]
            break

    if lowered in HTTP_METHODS:
        return lowered.upper(), is_live, seq_index
    return "", is_live, seq_index
