"""Test utilities for playgrounds::

    from dsplay.testing import TestClient
"""

from dsplay.testing.client import TestClient
from dsplay.testing.live import LiveTestResult, parse_sse_frames

__all__ = [
    "LiveTestResult",
    "TestClient",
    "parse_sse_frames",
]
