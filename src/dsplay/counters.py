"""Process-wide hit counters.

Free-threading safety:
    - Each counter owns a Lock around its increment
    - The per-URL map is read without locking; a missing key is inserted
      under the map lock with a second lookup (double-checked), so each
      URL gets exactly one counter even under concurrent first hits
"""

import threading


class Counter:
    """A thread-safe monotonically increasing integer."""

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


class HitCounters:
    """Global and per-URL request counts shared by every connection."""

    __slots__ = ("_global", "_lock", "_urls")

    def __init__(self) -> None:
        self._global = Counter()
        self._urls: dict[str, Counter] = {}
        self._lock = threading.Lock()

    def _url_counter(self, url_path: str) -> Counter:
        counter = self._urls.get(url_path)
        if counter is not None:
            return counter
        with self._lock:
            counter = self._urls.get(url_path)
            if counter is None:
                counter = Counter()
                self._urls[url_path] = counter
            return counter

    def hit(self, url_path: str) -> tuple[int, int]:
        """Count one request; return ``(global_hits, url_hits)``."""
        return self._global.increment(), self._url_counter(url_path).increment()

    @property
    def global_hits(self) -> int:
        return self._global.value

    def url_hits(self, url_path: str) -> int:
        counter = self._urls.get(url_path)
        return counter.value if counter is not None else 0
