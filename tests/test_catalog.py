"""
Alert rule catalog tests.
"""

import dataclasses

import pytest

from voldash.errors import NotFound
from voldash.rules.catalog import (
    AlertRuleDefinition,
    RuleId,
    Severity,
    SymbolCode,
    breached_rules,
    get_rule,
    list_rules,
    rules_for_symbol,
)


class TestListRules:
    """Test the shipped rule list."""

    def test_four_rules_in_fixed_order(self):
        """Should list the four built-in rules in catalog order."""
        ids = [rule.id for rule in list_rules()]
        assert ids == [
            RuleId.VIX_25,
            RuleId.VIX_40,
            RuleId.NIKKEI_30,
            RuleId.NIKKEI_45,
        ]

    def test_stable_across_calls(self):
        """Should return the same sequence every time."""
        assert list_rules() == list_rules()

    def test_ids_are_unique(self):
        """Should have exactly one definition per id."""
        ids = [rule.id for rule in list_rules()]
        assert len(ids) == len(set(ids))

    def test_shipped_thresholds(self):
        """Should ship the documented thresholds and severities."""
        table = {
            rule.id.value: (
                rule.symbol_code.value,
                rule.direction,
                rule.threshold,
                rule.severity.value,
            )
            for rule in list_rules()
        }
        assert table == {
            "VIX_25": ("VIX", ">=", 25, "notice"),
            "VIX_40": ("VIX", ">=", 40, "warning"),
            "NIKKEI_30": ("NIKKEI_VI", ">=", 30, "notice"),
            "NIKKEI_45": ("NIKKEI_VI", ">=", 45, "warning"),
        }

    def test_rules_are_immutable(self):
        """Should not allow mutating a definition."""
        rule = list_rules()[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.threshold = 10


class TestGetRule:
    """Test rule lookup."""

    @pytest.mark.parametrize("rule_id", list(RuleId))
    def test_lookup_returns_matching_id(self, rule_id):
        """Should return the rule with the requested id."""
        assert get_rule(rule_id).id == rule_id

    def test_lookup_by_string(self):
        """Should accept the string value of an id."""
        assert get_rule("NIKKEI_45").threshold == 45

    def test_unknown_id(self):
        """Should raise NotFound for an unknown id."""
        with pytest.raises(NotFound):
            get_rule("VIX_99")


class TestRuleMatching:
    """Test threshold evaluation."""

    def test_greater_equal(self):
        """Should match at and above the threshold."""
        rule = get_rule(RuleId.VIX_25)
        assert rule.matches(25.0)
        assert rule.matches(31.2)
        assert not rule.matches(24.99)

    def test_less_equal(self):
        """Should support the <= direction."""
        rule = AlertRuleDefinition(
            id=RuleId.VIX_25,
            symbol_code=SymbolCode.VIX,
            direction="<=",
            threshold=12,
            severity=Severity.NOTICE,
            title="calm",
            description="",
        )
        assert rule.matches(11.5)
        assert not rule.matches(12.5)

    def test_condition_text(self):
        """Should describe the condition."""
        assert get_rule(RuleId.NIKKEI_30).condition == "NIKKEI_VI >= 30"

    def test_rules_for_symbol(self):
        """Should filter rules by symbol."""
        ids = [rule.id for rule in rules_for_symbol("VIX")]
        assert ids == [RuleId.VIX_25, RuleId.VIX_40]

    def test_breached_rules(self):
        """Should report every rule whose condition holds."""
        breached = breached_rules({"VIX": 41.0, "NIKKEI_VI": 29.0})
        assert [rule.id for rule in breached] == [RuleId.VIX_25, RuleId.VIX_40]

    def test_breached_rules_missing_symbol(self):
        """Should skip symbols without a value."""
        assert breached_rules({"NIKKEI_VI": 46.0})[-1].id == RuleId.NIKKEI_45
        assert breached_rules({}) == []
