"""dsplay — a Datastar playground served from a directory of templates.

Each directory is a route; each template file answers one HTTP method
(or any) with a sequence of sections, either as a plain HTML response or
as a live stream of patches. Basic usage::

    from dsplay import Playground, PlaygroundConfig

    app = Playground(PlaygroundConfig(playground_dir="./demo"))
    app.run()

Or from the shell::

    dsplay serve ./demo --port 8080
"""

__version__ = "0.1.0-dev"
__all__ = [
    "Bridge",
    "ConfigurationError",
    "DsplayError",
    "HTTPError",
    "NotFound",
    "Playground",
    "PlaygroundConfig",
    "ScanError",
    "Signals",
    "SubjectBus",
    "TemplateRenderError",
    "scan_playground",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import dsplay`` fast while providing a clean top-level API.
    """
    if name == "Playground":
        from dsplay.app import Playground

        return Playground

    if name == "PlaygroundConfig":
        from dsplay.config import PlaygroundConfig

        return PlaygroundConfig

    if name in ("Bridge", "SubjectBus"):
        from dsplay import bridge as _bridge

        return getattr(_bridge, name)

    if name == "Signals":
        from dsplay.signals import Signals

        return Signals

    if name == "scan_playground":
        from dsplay.routes.scanner import scan_playground

        return scan_playground

    if name in (
        "ConfigurationError",
        "DsplayError",
        "HTTPError",
        "NotFound",
        "ScanError",
        "TemplateRenderError",
    ):
        from dsplay import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
