"""``dsplay serve`` — serve a playground directory."""

import argparse
import sys

from dsplay.app import Playground
from dsplay.config import PlaygroundConfig
from dsplay.errors import ConfigurationError


def run_serve(args: argparse.Namespace) -> None:
    """Build a Playground from CLI flags and run it on pounce."""
    config = PlaygroundConfig(
        host=args.host,
        port=args.port,
        debug=args.debug,
        log_level=args.log_level,
        playground_dir=args.directory,
        secret_key=args.secret,
        strict_scan=not args.lenient,
    )
    try:
        app = Playground(config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run()
    except ModuleNotFoundError as exc:
        print(
            f"Error: {exc}. Install the server extra: pip install 'dsplay[server]'",
            file=sys.stderr,
        )
        raise SystemExit(1) from exc
