"""Recursive discovery of rule documents under a rules root."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from rulecat.errors import RulesPathError

logger = logging.getLogger(__name__)

RULE_DOCUMENT_EXTENSION = ".yaml"


@dataclass(frozen=True)
class RuleDocumentFile:
    """A discovered rule document: its full path and raw bytes."""

    path: Path
    content: bytes


def is_rule_document(path: Path) -> bool:
    return path.name.lower().endswith(RULE_DOCUMENT_EXTENSION)


def _raise_walk_error(exc: OSError) -> None:
    path = Path(exc.filename) if exc.filename else Path()
    raise RulesPathError(path, f"Rules path is not accessible ({exc.strerror or exc})") from exc


def discover_documents(root: Path) -> list[RuleDocumentFile]:
    """Return every ``*.yaml`` file under *root* (any case), sorted by path.

    Raises :class:`RulesPathError` if *root* is missing, is not a
    directory, or any directory or file below it cannot be read.
    """
    root = Path(root)
    if not root.exists():
        raise RulesPathError(root, "Rules path does not exist")
    if not root.is_dir():
        raise RulesPathError(root, "Rules path is not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise RulesPathError(root, "Rules path is not accessible")

    # Unreadable directories raise through onerror.
    paths: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        base = Path(dirpath)
        paths.extend(base / name for name in filenames if is_rule_document(base / name))

    documents: list[RuleDocumentFile] = []
    for path in sorted(p for p in paths if p.is_file()):
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise RulesPathError(path, f"Cannot read rule document ({exc})") from exc
        documents.append(RuleDocumentFile(path=path, content=content))

    logger.debug("Discovered %d rule documents under %s", len(documents), root)
    return documents
