"""dsplay CLI — serve a playground, inspect its routes, scaffold a new one.

Entry point registered as ``dsplay`` in ``pyproject.toml``::

    [project.scripts]
    dsplay = "dsplay.cli:main"
"""

import argparse
import logging
import sys

from dsplay.config import PlaygroundConfig


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``dsplay`` command."""
    defaults = PlaygroundConfig()
    parser = argparse.ArgumentParser(
        prog="dsplay",
        description="dsplay — a Datastar playground served from a directory of templates.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- dsplay serve -----------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a playground directory")
    serve_parser.add_argument("directory", nargs="?", default=".", help="Playground directory")
    serve_parser.add_argument("--host", default=defaults.host, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=defaults.port, help="Bind port number")
    serve_parser.add_argument(
        "--secret",
        default=defaults.secret_key,
        help="Session cookie signing secret",
    )
    serve_parser.add_argument(
        "--debug",
        action="store_true",
        help="Log the route table at startup and show tracebacks on errors",
    )
    serve_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip unparseable template files instead of failing every request",
    )
    serve_parser.add_argument("--log-level", default=defaults.log_level, help="Logging level")

    # -- dsplay routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the routes a playground defines")
    routes_parser.add_argument("directory", nargs="?", default=".", help="Playground directory")

    # -- dsplay init ------------------------------------------------------
    init_parser = subparsers.add_parser("init", help="Create a skeleton playground")
    init_parser.add_argument("directory", nargs="?", default=".", help="Target directory")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Write files even if the directory is not empty",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        from dsplay.cli._serve import run_serve

        run_serve(args)
    elif args.command == "routes":
        from dsplay.cli._routes import run_routes

        run_routes(args)
    elif args.command == "init":
        from dsplay.cli._init import create_playground

        create_playground(args)
