"""``dsplay init`` — scaffold a playground directory.

Refuses to write into a non-empty directory unless ``--force`` is given;
with ``--force`` existing files of the same name are overwritten.
"""

import argparse
import sys
from pathlib import Path

from dsplay.cli._skeleton import FILES


def create_playground(args: argparse.Namespace) -> None:
    """Write the skeleton playground into ``args.directory``."""
    target = Path(args.directory)

    if target.exists():
        if not target.is_dir():
            print(f"Error: {target} exists but is not a directory", file=sys.stderr)
            raise SystemExit(1)
        if not args.force and any(target.iterdir()):
            print(
                f"Error: directory {target} is not empty (use --force to override)",
                file=sys.stderr,
            )
            raise SystemExit(1)

    for relative, content in FILES.items():
        path = target / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    print(f"Created playground in {target}")
    print()
    print(f"  dsplay serve {target}")
