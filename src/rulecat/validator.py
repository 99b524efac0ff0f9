"""Per-entry validation for source, sink and collection rules."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)


def is_valid_rule(pattern: str, rule_id: str, file_path: str) -> bool:
    """Return True if *pattern* is a non-empty, compilable regex and *rule_id* is set."""
    if not pattern:
        logger.debug("Empty pattern for rule '%s' in %s", rule_id, file_path)
        return False
    try:
        re.compile(pattern)
    except re.error as exc:
        logger.debug("Invalid regex for rule '%s' in %s: %s", rule_id, file_path, exc)
        return False
    if not rule_id:
        logger.debug("Rule with empty id in %s", file_path)
        return False
    return True
