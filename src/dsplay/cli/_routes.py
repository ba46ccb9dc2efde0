"""``dsplay routes`` — list the routes a playground directory defines."""

import argparse
import sys

from dsplay.errors import ScanError
from dsplay.routes.scanner import describe_routes, scan_playground


def run_routes(args: argparse.Namespace) -> None:
    """Scan ``args.directory`` and print one line per (path, kind, method)."""
    try:
        routes = scan_playground(args.directory)
    except ScanError as exc:
        print(f"Error scanning playgrounds: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    lines = describe_routes(routes)
    if not lines:
        print("No routes found.")
        return
    for line in lines:
        print(line)
