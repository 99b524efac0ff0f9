"""Tests for rulecat.exporting — report views over the catalogue."""

from __future__ import annotations

import pytest

from rulecat.catalogue import RuleCatalogue
from rulecat.exporting import policy_details_for_export, rule_info_for_export
from rulecat.models import (
    PolicyAction,
    PolicyOrThreat,
    PolicyOrThreatType,
    RuleBundle,
    RuleInfo,
)


@pytest.fixture()
def catalogue() -> RuleCatalogue:
    cat = RuleCatalogue()
    cat.load(
        RuleBundle(
            sources=(
                RuleInfo(
                    id="Data.Email",
                    name="Email",
                    category="Contact Data",
                    sensitivity="medium",
                    is_sensitive=True,
                    domains=("mail.example.com",),
                    tags=(("law", "GDPR"),),
                ),
            ),
            policies=(
                PolicyOrThreat(
                    id="Policy.Deny",
                    name="No sharing",
                    description="Do not share",
                    fix="Remove the call",
                    action=PolicyAction.DENY,
                ),
            ),
            threats=(
                PolicyOrThreat(
                    id="Threat.Log",
                    name="Leak via logs",
                    policy_or_threat_type=PolicyOrThreatType.THREAT,
                ),
            ),
        )
    )
    return cat


class TestRuleInfoForExport:
    def test_known_rule(self, catalogue: RuleCatalogue) -> None:
        assert rule_info_for_export(catalogue, "Data.Email") == {
            "id": "Data.Email",
            "name": "Email",
            "category": "Contact Data",
            "domains": ["mail.example.com"],
            "sensitivity": "medium",
            "isSensitive": True,
            "tags": {"law": "GDPR"},
        }

    def test_unknown_rule_gives_empty_summary(self, catalogue: RuleCatalogue) -> None:
        info = rule_info_for_export(catalogue, "Nope")
        assert info["id"] == ""
        assert info["isSensitive"] is False
        assert info["domains"] == []


class TestPolicyDetailsForExport:
    def test_policy(self, catalogue: RuleCatalogue) -> None:
        details = policy_details_for_export(catalogue, "Policy.Deny")
        assert details == {
            "name": "No sharing",
            "policyOrThreatType": "POLICY",
            "description": "Do not share",
            "fix": "Remove the call",
            "action": "DENY",
            "tags": {},
        }

    def test_threat_without_action(self, catalogue: RuleCatalogue) -> None:
        details = policy_details_for_export(catalogue, "Threat.Log")
        assert details is not None
        assert details["policyOrThreatType"] == "THREAT"
        assert details["action"] == ""

    def test_unknown(self, catalogue: RuleCatalogue) -> None:
        assert policy_details_for_export(catalogue, "Nope") is None
