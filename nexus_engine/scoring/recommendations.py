"""
Recommendation Generator
nexus_engine/scoring/recommendations.py

Declarative threshold rules mapping component values to qualitative advice.

Each calculator kind owns an ordered rule table and a fallback message.
Output order follows rule order; the fallback is returned alone when no
rule fires. Components are addressed by attribute path on the typed
components model, e.g. "confidence_95.lower".
"""

import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from nexus_engine.models.enumerations import CalculatorKind

_COMPARISONS: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class Rule:
    """Fire `message` when `component <comparison> threshold` holds."""
    component: str
    comparison: str
    threshold: float
    message: str

    def __post_init__(self):
        if self.comparison not in _COMPARISONS:
            raise ValueError(f"Unsupported comparison: {self.comparison}")

    def applies(self, components: Any) -> bool:
        value = resolve_component(components, self.component)
        if value is None:
            return False
        return _COMPARISONS[self.comparison](value, self.threshold)


@dataclass(frozen=True)
class RuleSet:
    rules: Tuple[Rule, ...]
    fallback: str


def resolve_component(components: Any, path: str) -> Any:
    """Walk a dotted attribute path; mappings are indexed by key."""
    value = components
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


# =============================================================================
# Rule tables
# =============================================================================

RULES: Dict[CalculatorKind, RuleSet] = {
    CalculatorKind.RCI: RuleSet(
        rules=(
            Rule("economic", "<", 70, "Focus on economic diversification and growth initiatives"),
            Rule("infrastructure", "<", 70, "Invest in infrastructure development and modernization"),
            Rule("human_capital", "<", 70, "Develop workforce skills and education programs"),
            Rule("innovation", "<", 70, "Support innovation hubs and technology adoption"),
        ),
        fallback="Maintain current competitive position",
    ),
    CalculatorKind.ROI: RuleSet(
        rules=(
            Rule("payback_period", ">", 5, "Consider phased investment approach to reduce payback time"),
            Rule("risk_adjusted_return", "<", 15, "Evaluate risk mitigation strategies to improve returns"),
            Rule("npv", "<", 0, "Reassess investment parameters and market assumptions"),
        ),
        fallback="Investment parameters look favorable",
    ),
    CalculatorKind.TPP: RuleSet(
        rules=(
            Rule("time_to_profit", ">", 3, "Implement aggressive market penetration strategies"),
            # annual_profit vs 10% of final_npv is relative; handled in tpp_calculator
        ),
        fallback="Profitability timeline is within acceptable range",
    ),
    CalculatorKind.SEAM: RuleSet(
        rules=(
            Rule("synergy_score", "<", 80, "Strengthen partner relationships and collaboration frameworks"),
            Rule("partner_diversity", "<", 0.7, "Diversify partnership portfolio across different sectors"),
        ),
        fallback="Ecosystem configuration is optimal",
    ),
    CalculatorKind.RISK: RuleSet(
        rules=(
            Rule("economic_risk", ">", 50, "Implement economic hedging strategies"),
            Rule("currency_risk", ">", 50, "Consider currency risk management tools"),
            Rule("political_risk", ">", 50, "Develop contingency plans for political changes"),
        ),
        fallback="Risk profile is within acceptable parameters",
    ),
    CalculatorKind.MONTE_CARLO: RuleSet(
        rules=(
            Rule("probability_of_profit", "<", 0.6, "Reassess investment assumptions and risk factors"),
            Rule("confidence_95.lower", "<", 0, "Consider conservative investment approach"),
        ),
        fallback="Monte Carlo results support investment decision",
    ),
    CalculatorKind.DEAL_SUCCESS: RuleSet(
        rules=(
            Rule("economic_stability", "<", 70, "Address economic stability concerns through policy reforms"),
            Rule("political_stability", "<", 70, "Strengthen political institutions and governance"),
            Rule("regulatory_quality", "<", 70, "Improve regulatory framework and transparency"),
            Rule("corruption_index", "<", 70, "Implement anti-corruption measures and accountability"),
        ),
        fallback="Deal success factors are favorable",
    ),
    CalculatorKind.TRUST: RuleSet(
        rules=(
            Rule("reputation_score", "<", 70, "Build reputation through transparent practices and track record"),
            Rule("transparency", "<", 70, "Enhance communication and information sharing"),
            Rule("alignment_of_interests", "<", 70, "Align interests through clear agreements and incentives"),
            Rule("conflict_resolution", "<", 70, "Establish robust dispute resolution mechanisms"),
        ),
        fallback="Trust foundation is strong",
    ),
    CalculatorKind.INVESTMENT_ATTRACTION: RuleSet(
        rules=(
            Rule("investment_incentives", "<", 70, "Develop competitive investment incentives and tax benefits"),
            Rule("ease_of_doing_business", "<", 70, "Streamline business registration and regulatory processes"),
            Rule("intellectual_property", "<", 70, "Strengthen IP protection and enforcement"),
            Rule("political_stability", "<", 70, "Enhance political stability and policy predictability"),
        ),
        fallback="Investment environment is attractive",
    ),
    CalculatorKind.COMPETITION: RuleSet(
        rules=(
            Rule("competitive_intensity", ">", 0.7, "Focus on differentiation and niche market strategies"),
            Rule("entry_barriers", "<", 50, "Monitor for new market entrants"),
        ),
        fallback="Competitive position is sustainable",
    ),
    CalculatorKind.COMPREHENSIVE_REGIONAL: RuleSet(
        rules=(
            Rule("location_score", "<", 70, "Improve proximity to key trade routes, ports, and airports"),
            Rule("economic_score", "<", 70, "Focus on economic diversification and reducing unemployment/poverty"),
            Rule("infrastructure_score", "<", 70, "Invest in transportation, utilities, digital connectivity, and education"),
            Rule("business_score", "<", 70, "Simplify regulations, reduce corruption, and improve political stability"),
            Rule("incentives_score", "<", 70, "Enhance tax incentives, tariff offsets, and subsidies"),
            Rule("social_score", "<", 70, "Address family separation concerns and improve cultural compatibility"),
            Rule("data_freshness", "<", 70, "Update regional data sources and verify information accuracy"),
        ),
        fallback="Regional profile is strong for investment",
    ),
    CalculatorKind.REGIONAL_COST_BENEFIT: RuleSet(
        rules=(
            Rule("total_cost_index", ">", 50, "Address high operational costs through efficiency improvements"),
            Rule("total_benefit_index", "<", 50, "Enhance market access and incentives to improve benefits"),
            Rule("competitive_position", "<", 80, "Strengthen competitive advantages and unique value propositions"),
            Rule("adjusted_roi", "<", 15, "Reassess investment parameters or seek alternative locations"),
        ),
        fallback="Cost-benefit analysis supports investment decision",
    ),
    CalculatorKind.PARTNERSHIP_VIABILITY: RuleSet(
        rules=(
            Rule("regulatory_compatibility", "<", 70, "Address regulatory compatibility issues through legal frameworks"),
            Rule("political_alignment", "<", 70, "Strengthen political relationships and alignment"),
            Rule("corruption_transparency", "<", 70, "Implement transparency measures and anti-corruption policies"),
            Rule("cultural_alignment", "<", 70, "Enhance cultural understanding and compatibility programs"),
            Rule("economic_complementary", "<", 70, "Align economic goals and complementary objectives"),
            Rule("infrastructure_compatibility", "<", 70, "Improve infrastructure integration and compatibility"),
        ),
        fallback="{partnership_type} partnership shows strong viability",
    ),
}


def generate_recommendations(
    kind: CalculatorKind,
    components: Any,
    extra: Tuple[str, ...] = (),
    context: Optional[Mapping[str, Any]] = None,
) -> List[str]:
    """
    Evaluate the rule table for `kind` against a components model.

    Args:
        kind: Calculator whose rules apply.
        components: Typed components model (or a plain dict).
        extra: Messages from relative checks that cannot be expressed as a
               fixed threshold; appended after the table rules.
        context: Values substituted into the fallback message.

    Returns:
        Ordered messages, or [fallback] when nothing fired.
    """
    rule_set = RULES[kind]
    fired = [rule.message for rule in rule_set.rules if rule.applies(components)]
    fired.extend(extra)
    return fired or [rule_set.fallback.format(**(context or {}))]
