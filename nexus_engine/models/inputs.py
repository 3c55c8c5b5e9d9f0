"""
Typed calculator inputs.

Produced by ParameterNormalizer: every field is populated and in domain.
`defaulted` names the fields that were substituted with their default.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from pydantic import Field

from nexus_engine.models.base import NexusModel
from nexus_engine.models.enumerations import PartnershipType, VerificationStatus


@dataclass(frozen=True)
class RCIInput:
    economic: float          # economic magnitude (e.g. GDP in USD)
    infrastructure: float
    human_capital: float
    institutions: float
    innovation: float
    market_access: float
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InvestmentInput:
    initial_investment: float
    expected_roi: float      # percent per year
    timeline: int            # periods (years)
    risk_factor: float       # risk-adjusted discount rate in [0, 1]
    market_size: float
    growth_rate: float       # percent per year
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MonteCarloInput:
    initial_investment: float
    expected_roi: float
    timeline: int
    risk_factor: float
    iterations: int
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskInput:
    gdp_growth: float
    inflation: float
    trade_balance: float
    political_risk: float
    regulatory_risk: float
    operational_risk: float
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DealSuccessInput:
    economic_stability: float
    political_stability: float
    regulatory_quality: float
    infrastructure_quality: float
    market_access: float
    human_capital: float
    corruption_index: float
    contract_enforcement: float
    partner_reputation: float
    cultural_compatibility: float
    technology_adoption: float
    financial_health: float
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TrustInput:
    reputation: float
    track_record: float
    transparency: float
    communication: float
    alignment: float
    power_balance: float
    exit_strategy: float
    conflict_resolution: float
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InvestmentAttractionInput:
    incentives: float
    business_ease: float
    tax_regime: float
    ip_protection: float
    dispute_resolution: float
    market_size: float
    growth_potential: float
    location: float
    political_stability: float
    corruption: float
    infrastructure: float
    workforce: float
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompetitionInput:
    competitor_count: int
    entry_barriers: float
    innovation_rate: float
    defaulted: Tuple[str, ...] = ()


class Partner(NexusModel):
    """One member of a partner ecosystem."""
    name: str
    type: str = "Anchor"
    capabilities: List[str] = Field(default_factory=list)
    commitment: float = Field(default=70.0, ge=0, le=100)
    reputation: float = Field(default=70.0, ge=0, le=100)
    rationale: str = ""


@dataclass(frozen=True)
class SEAMInput:
    partners: Tuple[Partner, ...]
    region: str = ""
    industry: str = ""
    defaulted: Tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class RegionalProfileInput:
    """Detailed profile of one candidate location."""
    city: str
    # location, km to the nearest facility
    proximity_to_trade_routes: float
    proximity_to_ports: float
    proximity_to_airports: float
    # economic profile
    contribution_to_national_gdp: float   # percent
    local_market_size: float
    cost_of_living_index: float           # 0-200, 100 = reference city
    average_salary: float                 # monthly, USD
    unemployment_rate: float              # percent
    poverty_rate: float                   # percent
    growth_potential: float
    # infrastructure readiness
    transportation_score: float
    utilities_score: float
    digital_connectivity: float
    education_quality: float
    healthcare_access: float
    housing_availability: float
    # business environment (complexity, corruption and crime: higher is worse)
    ease_of_doing_business: float
    regulatory_complexity: float
    corruption_index: float
    crime_rate: float
    political_stability: float
    government_efficiency: float
    # incentives
    tax_incentives: Tuple[float, ...]
    tariff_offsets: float
    subsidies: float
    # social factors
    family_separation_risk: float
    community_acceptance: float
    cultural_compatibility: float
    labor_rights: float
    environmental_standards: float
    competitive_advantages: Tuple[str, ...]
    verification_status: VerificationStatus
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RegionalCostBenefitInput:
    region: RegionalProfileInput
    investment: InvestmentInput
    alternatives: Tuple[RegionalProfileInput, ...]
    defaulted: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PartnershipViabilityInput:
    partnership_type: PartnershipType
    region: RegionalProfileInput
    deal_parameters: Dict[str, Any] = field(default_factory=dict)
    defaulted: Tuple[str, ...] = ()
