"""Playground configuration.

PlaygroundConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class PlaygroundConfig:
    """Playground configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = PlaygroundConfig(playground_dir="./demo", port=3000, debug=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    log_level: str = "info"

    # Playground tree
    playground_dir: str | Path = "."
    template_extension: str = ".html"
    strict_scan: bool = True  # False: skip unparseable files instead of failing the request

    # Static files (served from <playground_dir>/static)
    static_prefix: str = "/static"

    # Sessions
    secret_key: str = "ds-play-dev-secret-change-me"
    session_cookie: str = "ds-play"
    session_max_age: int = 3600  # 1 hour

    # Live updates
    live_header: str = "datastar-request"
    bridge_namespace: str = "dspen"
    default_delay_ms: int = 5000
    sse_heartbeat_interval: float = 15.0

    @property
    def static_dir(self) -> Path:
        """Directory served under ``static_prefix``."""
        return Path(self.playground_dir) / "static"
