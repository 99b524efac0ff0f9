"""Load every rule document under one rules root into a single bundle."""

from __future__ import annotations

import functools
import logging
import operator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from rulecat.models import Diagnostic, RuleBundle
from rulecat.parser import parse_document
from rulecat.walker import discover_documents

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Summary of loading one rules root."""

    bundle: RuleBundle = field(default_factory=RuleBundle)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    documents_parsed: int = 0
    entries_dropped: int = 0


def fold_bundles(bundles: Iterable[RuleBundle]) -> RuleBundle:
    """Concatenate *bundles* per category, in order.  Empty input gives ``RuleBundle()``."""
    return functools.reduce(operator.add, bundles, RuleBundle())


def load_rules(root: Path) -> LoadResult:
    """Walk *root*, parse each document in path order, and fold the results.

    Raises :class:`~rulecat.errors.RulesPathError` when *root* cannot be
    walked.  Malformed documents are reported in ``diagnostics``.
    """
    root = Path(root)
    logger.debug("Parsing rules from %s", root)
    result = LoadResult()
    bundles: list[RuleBundle] = []

    for document in discover_documents(root):
        parsed = parse_document(document.path, document.content, root)
        result.documents_parsed += 1
        result.entries_dropped += parsed.dropped
        if parsed.diagnostic is not None:
            result.diagnostics.append(parsed.diagnostic)
        bundles.append(parsed.bundle)

    result.bundle = fold_bundles(bundles)
    logger.debug(
        "Loaded %d entries from %d documents under %s (%d dropped, %d rejected)",
        result.bundle.total_entries(),
        result.documents_parsed,
        root,
        result.entries_dropped,
        len(result.diagnostics),
    )
    return result
