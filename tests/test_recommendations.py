"""
Recommendation Rule Tests
tests/test_recommendations.py
"""

import pytest

from nexus_engine.models.enumerations import CalculatorKind
from nexus_engine.scoring.recommendations import (
    RULES,
    Rule,
    generate_recommendations,
    resolve_component,
)


class TestRule:
    """Tests for a single threshold rule."""

    def test_strict_comparison(self):
        rule = Rule("infrastructure", "<", 70, "Invest")
        assert rule.applies({"infrastructure": 69.9})
        assert not rule.applies({"infrastructure": 70})

    def test_missing_value_never_fires(self):
        rule = Rule("payback_period", ">", 5, "Phase it")
        assert not rule.applies({"payback_period": None})
        assert not rule.applies({})

    def test_unknown_comparison_rejected(self):
        with pytest.raises(ValueError):
            Rule("x", "==", 1, "never")

    def test_nested_path(self):
        assert resolve_component({"confidence_95": {"lower": -3}}, "confidence_95.lower") == -3
        assert resolve_component({"confidence_95": None}, "confidence_95.lower") is None


class TestGenerateRecommendations:
    """Tests for rule-table evaluation."""

    def test_every_kind_has_rules(self):
        assert set(RULES) == set(CalculatorKind)

    def test_fallback_when_nothing_fires(self):
        components = {"economic": 90, "infrastructure": 90, "human_capital": 90, "innovation": 90}
        assert generate_recommendations(CalculatorKind.RCI, components) == [
            "Maintain current competitive position"
        ]

    def test_rule_order_is_preserved(self):
        components = {"economic": 10, "infrastructure": 10, "human_capital": 90, "innovation": 10}
        assert generate_recommendations(CalculatorKind.RCI, components) == [
            "Focus on economic diversification and growth initiatives",
            "Invest in infrastructure development and modernization",
            "Support innovation hubs and technology adoption",
        ]

    def test_extra_messages_suppress_fallback(self):
        result = generate_recommendations(
            CalculatorKind.TPP, {"time_to_profit": 1}, ("Optimize cost structure and revenue streams",)
        )
        assert result == ["Optimize cost structure and revenue streams"]
