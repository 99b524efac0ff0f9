"""Rule catalogue: the merged bundle plus id lookups, loaded exactly once."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rulecat.errors import CatalogueAlreadyLoadedError, CatalogueNotLoadedError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rulecat.models import PolicyOrThreat, RuleBundle, RuleInfo

logger = logging.getLogger(__name__)


class RuleCatalogue:
    """Single-assignment store for the merged rule set.

    Built once at startup with :meth:`load` and read-only afterwards, so
    concurrent readers need no locking.
    """

    def __init__(self) -> None:
        self._rules: RuleBundle | None = None
        self._rules_by_id: dict[str, RuleInfo] = {}
        self._policies_by_id: dict[str, PolicyOrThreat] = {}
        self._internal_policy_ids: frozenset[str] = frozenset()

    def load(self, rules: RuleBundle, *, internal_policy_ids: Iterable[str] = ()) -> None:
        """Install the merged *rules*.  Raises on a second call."""
        if self._rules is not None:
            raise CatalogueAlreadyLoadedError

        rules_by_id: dict[str, RuleInfo] = {}
        for rule in (*rules.sources, *rules.sinks, *rules.collections, *rules.exclusions):
            # Ids are unique within a category; across categories the first wins.
            rules_by_id.setdefault(rule.id, rule)

        policies_by_id: dict[str, PolicyOrThreat] = {}
        for policy in (*rules.policies, *rules.threats):
            policies_by_id.setdefault(policy.id, policy)

        self._rules_by_id = rules_by_id
        self._policies_by_id = policies_by_id
        self._internal_policy_ids = frozenset(internal_policy_ids)
        self._rules = rules
        logger.debug(
            "Catalogue loaded: %d rules, %d policies/threats",
            len(rules_by_id),
            len(policies_by_id),
        )

    @property
    def is_loaded(self) -> bool:
        return self._rules is not None

    @property
    def rules(self) -> RuleBundle:
        if self._rules is None:
            raise CatalogueNotLoadedError
        return self._rules

    @property
    def internal_policy_ids(self) -> frozenset[str]:
        self._require_loaded()
        return self._internal_policy_ids

    @property
    def rules_used(self) -> int:
        return self.rules.rules_used()

    def lookup_rule(self, rule_id: str) -> RuleInfo | None:
        """Return the source, sink, collection or exclusion with *rule_id*."""
        self._require_loaded()
        return self._rules_by_id.get(rule_id)

    def lookup_policy_or_threat(self, policy_id: str) -> PolicyOrThreat | None:
        self._require_loaded()
        return self._policies_by_id.get(policy_id)

    def is_internal_policy(self, policy_id: str) -> bool:
        """True if *policy_id* came from the built-in rules, not a user document."""
        return policy_id in self.internal_policy_ids

    def _require_loaded(self) -> None:
        if self._rules is None:
            raise CatalogueNotLoadedError
