"""Shared test fixtures for rulecat."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture()
def write_doc() -> Callable[[Path, str, str], Path]:
    """Return a helper that writes a rule document below a rules root."""

    def _write(root: Path, rel_path: str, text: str) -> Path:
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def internal_root(tmp_path: Path) -> Path:
    root = tmp_path / "internal"
    root.mkdir()
    return root


@pytest.fixture()
def external_root(tmp_path: Path) -> Path:
    root = tmp_path / "external"
    root.mkdir()
    return root
