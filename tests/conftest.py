"""Shared fixtures: throwaway playground trees and apps built on them."""

from collections.abc import Callable
from pathlib import Path

import pytest

from dsplay.app import Playground
from dsplay.config import PlaygroundConfig


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Create *files* (relative path -> content) under *root*."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def playground(tmp_path: Path) -> Callable[..., Path]:
    """Factory: ``playground({"index.html": "hi"})`` returns the root."""

    def build(files: dict[str, str]) -> Path:
        root = tmp_path / "playground"
        root.mkdir(exist_ok=True)
        return write_files(root, files)

    return build


@pytest.fixture
def make_app(playground: Callable[..., Path]) -> Callable[..., Playground]:
    """Factory: ``make_app({"index.html": "hi"}, debug=True)``."""

    def build(files: dict[str, str], **overrides: object) -> Playground:
        root = playground(files)
        return Playground(PlaygroundConfig(playground_dir=root, **overrides))

    return build
