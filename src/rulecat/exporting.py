"""Catalogue views used by report renderers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rulecat.catalogue import RuleCatalogue


def rule_info_for_export(catalogue: RuleCatalogue, rule_id: str) -> dict[str, Any]:
    """Return the reportable fields of a rule; an all-empty summary for unknown ids."""
    rule = catalogue.lookup_rule(rule_id)
    if rule is None:
        return {
            "id": "",
            "name": "",
            "category": "",
            "domains": [],
            "sensitivity": "",
            "isSensitive": False,
            "tags": {},
        }
    return {
        "id": rule.id,
        "name": rule.name,
        "category": rule.category,
        "domains": list(rule.domains),
        "sensitivity": rule.sensitivity,
        "isSensitive": rule.is_sensitive,
        "tags": dict(rule.tags),
    }


def policy_details_for_export(catalogue: RuleCatalogue, policy_id: str) -> dict[str, Any] | None:
    """Return the violation details of a policy or threat, or None if unknown."""
    policy = catalogue.lookup_policy_or_threat(policy_id)
    if policy is None:
        return None
    return {
        "name": policy.name,
        "policyOrThreatType": policy.policy_or_threat_type.value,
        "description": policy.description,
        "fix": policy.fix,
        "action": policy.action.value if policy.action is not None else "",
        "tags": dict(policy.tags),
    }
