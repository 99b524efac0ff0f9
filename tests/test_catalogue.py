"""Tests for rulecat.catalogue — single-assignment rule catalogue."""

from __future__ import annotations

import pytest

from rulecat.catalogue import RuleCatalogue
from rulecat.errors import CatalogueAlreadyLoadedError, CatalogueNotLoadedError
from rulecat.models import PolicyOrThreat, RuleBundle, RuleInfo


def _bundle() -> RuleBundle:
    return RuleBundle(
        sources=(RuleInfo(id="Data.Email", name="Email"),),
        sinks=(RuleInfo(id="Sink.Log", name="Logger"), RuleInfo(id="Shared", name="sink")),
        exclusions=(RuleInfo(id="Shared", name="exclusion"),),
        policies=(PolicyOrThreat(id="Policy.A", name="A"),),
        threats=(PolicyOrThreat(id="Threat.T", name="T"),),
    )


@pytest.fixture()
def catalogue() -> RuleCatalogue:
    cat = RuleCatalogue()
    cat.load(_bundle(), internal_policy_ids=["Policy.A"])
    return cat


class TestLoad:
    def test_second_load_rejected(self, catalogue: RuleCatalogue) -> None:
        with pytest.raises(CatalogueAlreadyLoadedError):
            catalogue.load(RuleBundle())

    def test_reads_before_load_rejected(self) -> None:
        cat = RuleCatalogue()
        assert not cat.is_loaded
        with pytest.raises(CatalogueNotLoadedError):
            cat.lookup_rule("Data.Email")
        with pytest.raises(CatalogueNotLoadedError):
            _ = cat.rules

    def test_empty_bundle(self) -> None:
        cat = RuleCatalogue()
        cat.load(RuleBundle())
        assert cat.is_loaded
        assert cat.rules_used == 0
        assert cat.internal_policy_ids == frozenset()


class TestLookups:
    def test_lookup_rule(self, catalogue: RuleCatalogue) -> None:
        rule = catalogue.lookup_rule("Sink.Log")
        assert rule is not None
        assert rule.name == "Logger"

    def test_lookup_rule_missing(self, catalogue: RuleCatalogue) -> None:
        assert catalogue.lookup_rule("Nope") is None

    def test_cross_category_id_first_wins(self, catalogue: RuleCatalogue) -> None:
        rule = catalogue.lookup_rule("Shared")
        assert rule is not None
        assert rule.name == "sink"

    def test_lookup_policy_and_threat(self, catalogue: RuleCatalogue) -> None:
        policy = catalogue.lookup_policy_or_threat("Policy.A")
        threat = catalogue.lookup_policy_or_threat("Threat.T")
        assert policy is not None and policy.name == "A"
        assert threat is not None and threat.name == "T"
        assert catalogue.lookup_policy_or_threat("Data.Email") is None

    def test_internal_policies(self, catalogue: RuleCatalogue) -> None:
        assert catalogue.internal_policy_ids == frozenset({"Policy.A"})
        assert catalogue.is_internal_policy("Policy.A")
        assert not catalogue.is_internal_policy("Threat.T")

    def test_rules_used(self, catalogue: RuleCatalogue) -> None:
        # sources + sinks + collections + policies + exclusions
        assert catalogue.rules_used == 5
