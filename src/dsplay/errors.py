"""dsplay exception hierarchy.

Shared across the scanner, session store, dispatcher, and live engine so
every module raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path


class DsplayError(Exception):
    """Base for all dsplay-specific errors."""


class ConfigurationError(DsplayError):
    """Raised when playground configuration is invalid.

    Typically raised by ``Playground.__init__`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(DsplayError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher. The ASGI entry point catches these and
    turns them into plain-text responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route, or no file list for this method and response kind."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class FrontmatterError(DsplayError):
    """The options block at the top of a template file is malformed."""


class ScanError(DsplayError):
    """Building the route table failed.

    Wraps the underlying ``OSError`` or ``FrontmatterError`` and records
    which file was being processed.
    """

    def __init__(self, path: str | Path, cause: Exception) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{self.path}: {cause}")


class TemplateRenderError(DsplayError):
    """A section failed to compile or render.

    ``cause`` is the original template-engine exception.
    """

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class SessionDecodeError(DsplayError):
    """The session cookie is present but cannot be verified or decoded."""


class BridgeError(DsplayError):
    """Publishing to or subscribing on the signal bridge failed."""
