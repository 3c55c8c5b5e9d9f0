"""
Composite result models.

Every calculator returns a CompositeResult subclass: the shared shape
{score, components, recommendations, confidence, analysis} plus a literal
`kind` tag and a components model specific to the calculator.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from nexus_engine.models.base import NexusModel


class CompositeResult(NexusModel):
    """Shared result shape for every composite index calculator."""
    kind: str
    score: int = Field(..., ge=0, le=100)
    components: NexusModel
    recommendations: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)
    analysis: str = ""
    defaulted_fields: List[str] = Field(
        default_factory=list,
        description="Input fields that were substituted with their documented default",
    )


# =============================================================================
# Component models
# =============================================================================

class RCIComponents(NexusModel):
    economic: float
    infrastructure: float
    human_capital: float
    institutions: float
    innovation: float
    market_access: float


class ROIComponents(NexusModel):
    npv: float
    irr: float
    payback_period: Optional[float] = None  # None when there is no nominal return
    roi: float
    risk_adjusted_return: float


class YearProjection(NexusModel):
    year: int
    revenue: float
    profit: float
    cumulative_profit: float


class TPPComponents(NexusModel):
    time_to_profit: int
    breaks_even_within_horizon: bool
    final_npv: float
    annual_profit: float
    projections: List[YearProjection]
    market_penetration: float


class SEAMComponents(NexusModel):
    ecosystem_strength: float
    synergy_score: float
    partner_diversity: float
    network_density: float
    collaboration_opportunities: int
    risk_mitigation_strategies: List[str]
    value_creation_potential: float
    partnership_stability_index: float
    partner_count: int
    mode: str


class RiskComponents(NexusModel):
    economic_risk: float
    market_risk: float
    currency_risk: float
    political_risk: float
    regulatory_risk: float
    operational_risk: float
    total_risk_score: float


class ConfidenceInterval(NexusModel):
    lower: float
    upper: float


class MonteCarloComponents(NexusModel):
    mean_npv: float
    standard_deviation: float
    confidence_95: ConfidenceInterval
    probability_of_profit: float
    best_case: float
    worst_case: float
    iterations: int


class DealSuccessComponents(NexusModel):
    economic_stability: float
    political_stability: float
    regulatory_quality: float
    infrastructure_quality: float
    market_access: float
    human_capital: float
    corruption_index: float  # inverted: higher is cleaner
    contract_enforcement: float
    partner_reputation: float
    cultural_compatibility: float
    technology_adoption: float
    financial_health: float


class TrustComponents(NexusModel):
    reputation_score: float
    track_record: float
    transparency: float
    communication_quality: float
    alignment_of_interests: float
    power_balance: float
    exit_strategy: float
    conflict_resolution: float


class InvestmentAttractionComponents(NexusModel):
    investment_incentives: float
    ease_of_doing_business: float
    tax_regime: float
    intellectual_property: float
    dispute_resolution: float
    market_size: float
    growth_potential: float
    strategic_location: float
    political_stability: float
    corruption_perception: float  # inverted: higher is cleaner
    infrastructure_readiness: float
    workforce_quality: float


class CompetitionComponents(NexusModel):
    market_concentration: float
    competitive_intensity: float
    entry_barriers: float
    innovation_rate: float
    market_share_distribution: List[float]
    competitive_advantages: List[str]


class ComprehensiveRegionalComponents(NexusModel):
    location_score: float
    economic_score: float
    infrastructure_score: float
    business_score: float
    incentives_score: float
    social_score: float
    competitive_advantages: List[str]
    data_freshness: float


class AlternativeComparison(NexusModel):
    location: str
    score: int
    difference: int  # base location score minus this alternative's


class RegionalCostBenefitComponents(NexusModel):
    base_location_score: int
    total_cost_index: float
    total_benefit_index: float
    competitive_position: float
    adjusted_roi: float
    cost_breakdown: Dict[str, float]
    benefit_breakdown: Dict[str, float]
    alternative_comparison: List[AlternativeComparison]


class PartnershipViabilityComponents(NexusModel):
    regulatory_compatibility: float
    cultural_alignment: float
    economic_complementary: float
    infrastructure_compatibility: float
    political_alignment: float
    corruption_transparency: float
    partnership_type: str
    base_factors: Dict[str, float]
    adjustments: Dict[str, float]
    deal_parameters: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Tagged result variants
# =============================================================================

class RCIResult(CompositeResult):
    kind: Literal["rci"] = "rci"
    components: RCIComponents


class ROIResult(CompositeResult):
    kind: Literal["roi"] = "roi"
    components: ROIComponents


class TPPResult(CompositeResult):
    kind: Literal["tpp"] = "tpp"
    components: TPPComponents


class SEAMResult(CompositeResult):
    kind: Literal["seam"] = "seam"
    components: SEAMComponents


class RiskResult(CompositeResult):
    kind: Literal["risk"] = "risk"
    components: RiskComponents


class MonteCarloResult(CompositeResult):
    kind: Literal["monte_carlo"] = "monte_carlo"
    components: MonteCarloComponents


class DealSuccessResult(CompositeResult):
    kind: Literal["deal_success"] = "deal_success"
    components: DealSuccessComponents


class TrustResult(CompositeResult):
    kind: Literal["trust"] = "trust"
    components: TrustComponents


class InvestmentAttractionResult(CompositeResult):
    kind: Literal["investment_attraction"] = "investment_attraction"
    components: InvestmentAttractionComponents


class CompetitionResult(CompositeResult):
    kind: Literal["competition"] = "competition"
    components: CompetitionComponents


class ComprehensiveRegionalResult(CompositeResult):
    kind: Literal["comprehensive_regional"] = "comprehensive_regional"
    components: ComprehensiveRegionalComponents


class RegionalCostBenefitResult(CompositeResult):
    kind: Literal["regional_cost_benefit"] = "regional_cost_benefit"
    components: RegionalCostBenefitComponents


class PartnershipViabilityResult(CompositeResult):
    kind: Literal["partnership_viability"] = "partnership_viability"
    components: PartnershipViabilityComponents


AnyCompositeResult = Annotated[
    Union[
        RCIResult,
        ROIResult,
        TPPResult,
        SEAMResult,
        RiskResult,
        MonteCarloResult,
        DealSuccessResult,
        TrustResult,
        InvestmentAttractionResult,
        CompetitionResult,
        ComprehensiveRegionalResult,
        RegionalCostBenefitResult,
        PartnershipViabilityResult,
    ],
    Field(discriminator="kind"),
]
