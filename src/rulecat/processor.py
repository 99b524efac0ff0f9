"""Ingest the internal and external rule roots and build the catalogue."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rulecat.catalogue import RuleCatalogue
from rulecat.loader import LoadResult, load_rules
from rulecat.merger import internal_policy_ids, merge_bundles

if TYPE_CHECKING:
    from pathlib import Path

    from rulecat.config import RulesConfig
    from rulecat.models import Diagnostic

logger = logging.getLogger(__name__)

NOT_DETECTED = "not detected"
VERSION_FILE = "version.txt"


@dataclass
class ProcessResult:
    """Outcome of one rule ingestion run."""

    catalogue: RuleCatalogue
    internal_version: str = NOT_DETECTED
    rules_used: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    internal: LoadResult | None = None
    external: LoadResult | None = None


def read_rules_version(root: Path) -> str:
    """Return the stripped contents of ``<root>/version.txt``, or ``"not detected"``."""
    try:
        version = (root / VERSION_FILE).read_text(encoding="utf-8").strip()
    except OSError:
        logger.debug("No readable %s under %s", VERSION_FILE, root)
        return NOT_DETECTED
    return version or NOT_DETECTED


def process_rules(config: RulesConfig) -> ProcessResult:
    """Load both rule roots, merge them with external precedence, and cache the result.

    Raises :class:`~rulecat.errors.RulesPathError` if a configured root is
    missing or unreadable; no catalogue is produced in that case.
    """
    internal: LoadResult | None = None
    version = NOT_DETECTED
    if not config.ignore_internal_rules and config.internal_rules_path is not None:
        internal = load_rules(config.internal_rules_path)
        version = read_rules_version(config.internal_rules_path)
        logger.info("Internal rules version: %s", version)

    external: LoadResult | None = None
    if config.external_rules_path is not None:
        external = load_rules(config.external_rules_path)

    internal_bundle = internal.bundle if internal else None
    merged = merge_bundles(internal_bundle, external.bundle if external else None)

    logger.info("Caching rules")
    catalogue = RuleCatalogue()
    catalogue.load(merged, internal_policy_ids=internal_policy_ids(internal_bundle))

    diagnostics: list[Diagnostic] = []
    for loaded in (internal, external):
        if loaded is not None:
            diagnostics.extend(loaded.diagnostics)

    return ProcessResult(
        catalogue=catalogue,
        internal_version=version,
        rules_used=merged.rules_used(),
        diagnostics=diagnostics,
        internal=internal,
        external=external,
    )
