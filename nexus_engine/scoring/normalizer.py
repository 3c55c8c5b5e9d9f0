"""
Parameter Normalizer
nexus_engine/scoring/normalizer.py

Turns a raw input mapping into a complete, typed calculator input.

Rules (per field):
    missing / None / bool / str / NaN / ±inf  → documented default
    numeric                                    → clamped into [minimum, maximum]
    monetary amounts                           → at most MAX_AMOUNT (1e15)
    integer fields                             → rounded half-up after clamping

Regional profiles may arrive flat or grouped the way survey data is
usually kept ({"location": {...}, "economicProfile": {...}}); groups are
flattened before the field specs apply.

Raw keys may be camelCase (wire format, e.g. "humanCapital") or the
snake_case field name. The normalizer never raises on input defects.
"""

import math
import numbers
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

import structlog

from nexus_engine.models.enumerations import PartnershipType, VerificationStatus
from nexus_engine.models.inputs import (
    CompetitionInput,
    DealSuccessInput,
    InvestmentAttractionInput,
    InvestmentInput,
    MonteCarloInput,
    Partner,
    PartnershipViabilityInput,
    RCIInput,
    RegionalCostBenefitInput,
    RegionalProfileInput,
    RiskInput,
    SEAMInput,
    TrustInput,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# ceiling for monetary amounts; keeps every downstream sum finite
MAX_AMOUNT = 1e15


@dataclass(frozen=True)
class FieldSpec:
    """Declared domain and default for one calculator input field."""
    name: str
    alias: str
    default: float
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    integer: bool = False


def _score(name: str, alias: str, default: float) -> FieldSpec:
    """Sub-score on the 0-100 scale."""
    return FieldSpec(name, alias, default, 0.0, 100.0)


def _ratio(name: str, alias: str, default: float) -> FieldSpec:
    """Fraction on the 0-1 scale."""
    return FieldSpec(name, alias, default, 0.0, 1.0)


_INVESTMENT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("initial_investment", "initialInvestment", 1_000_000.0, 0.0, MAX_AMOUNT),
    FieldSpec("expected_roi", "expectedROI", 15.0, -100.0, 1000.0),
    FieldSpec("timeline", "timeline", 5, 1, 50, integer=True),
    _ratio("risk_factor", "riskFactor", 0.1),
    FieldSpec("market_size", "marketSize", 10_000_000.0, 0.0, MAX_AMOUNT),
    FieldSpec("growth_rate", "growthRate", 5.0, 0.0, 100.0),
)

INPUT_SPECS: Dict[type, Tuple[FieldSpec, ...]] = {
    RCIInput: (
        FieldSpec("economic", "economic", 5e11, 0.0, MAX_AMOUNT),
        _score("infrastructure", "infrastructure", 70.0),
        _score("human_capital", "humanCapital", 75.0),
        _score("institutions", "institutions", 75.0),
        _score("innovation", "innovation", 65.0),
        _score("market_access", "marketAccess", 80.0),
    ),
    InvestmentInput: _INVESTMENT_FIELDS,
    MonteCarloInput: (
        FieldSpec("initial_investment", "initialInvestment", 1_000_000.0, 0.0, MAX_AMOUNT),
        FieldSpec("expected_roi", "expectedROI", 15.0, -100.0, 1000.0),
        FieldSpec("timeline", "timeline", 5, 1, 50, integer=True),
        _ratio("risk_factor", "riskFactor", 0.1),
        FieldSpec("iterations", "iterations", 1000, 1, 100_000, integer=True),
    ),
    RiskInput: (
        FieldSpec("gdp_growth", "gdpGrowth", 3.0, -100.0, 100.0),
        FieldSpec("inflation", "inflation", 2.0, 0.0, 100.0),
        FieldSpec("trade_balance", "tradeBalance", 0.0, -MAX_AMOUNT, MAX_AMOUNT),
        _ratio("political_risk", "politicalRisk", 0.20),
        _ratio("regulatory_risk", "regulatoryRisk", 0.15),
        _ratio("operational_risk", "operationalRisk", 0.25),
    ),
    DealSuccessInput: (
        _score("economic_stability", "economicStability", 70.0),
        _score("political_stability", "politicalStability", 70.0),
        _score("regulatory_quality", "regulatoryQuality", 70.0),
        _score("infrastructure_quality", "infrastructureQuality", 70.0),
        _score("market_access", "marketAccess", 70.0),
        _score("human_capital", "humanCapital", 70.0),
        _score("corruption_index", "corruptionIndex", 30.0),
        _score("contract_enforcement", "contractEnforcement", 70.0),
        _score("partner_reputation", "partnerReputation", 70.0),
        _score("cultural_compatibility", "culturalCompatibility", 70.0),
        _score("technology_adoption", "technologyAdoption", 70.0),
        _score("financial_health", "financialHealth", 70.0),
    ),
    TrustInput: (
        _score("reputation", "reputation", 70.0),
        _score("track_record", "trackRecord", 75.0),
        _score("transparency", "transparency", 65.0),
        _score("communication", "communication", 70.0),
        _score("alignment", "alignment", 80.0),
        _score("power_balance", "powerBalance", 60.0),
        _score("exit_strategy", "exitStrategy", 55.0),
        _score("conflict_resolution", "conflictResolution", 65.0),
    ),
    InvestmentAttractionInput: (
        _score("incentives", "incentives", 75.0),
        _score("business_ease", "businessEase", 70.0),
        _score("tax_regime", "taxRegime", 65.0),
        _score("ip_protection", "ipProtection", 80.0),
        _score("dispute_resolution", "disputeResolution", 75.0),
        _score("market_size", "marketSize", 85.0),
        _score("growth_potential", "growthPotential", 80.0),
        _score("location", "location", 70.0),
        _score("political_stability", "politicalStability", 65.0),
        _score("corruption", "corruption", 30.0),
        _score("infrastructure", "infrastructure", 75.0),
        _score("workforce", "workforce", 70.0),
    ),
    CompetitionInput: (
        FieldSpec("competitor_count", "competitorCount", 5, 0, 1000, integer=True),
        _score("entry_barriers", "entryBarriers", 55.0),
        _score("innovation_rate", "innovationRate", 70.0),
    ),
    RegionalProfileInput: (
        FieldSpec("proximity_to_trade_routes", "proximityToTradeRoutes", 50.0, 0.0, 20_000.0),
        FieldSpec("proximity_to_ports", "proximityToPorts", 40.0, 0.0, 20_000.0),
        FieldSpec("proximity_to_airports", "proximityToAirports", 30.0, 0.0, 20_000.0),
        _score("contribution_to_national_gdp", "contributionToNationalGDP", 5.0),
        FieldSpec("local_market_size", "localMarketSize", 5_000_000.0, 0.0, MAX_AMOUNT),
        FieldSpec("cost_of_living_index", "costOfLivingIndex", 50.0, 0.0, 200.0),
        FieldSpec("average_salary", "averageSalary", 1500.0, 0.0, 1_000_000.0),
        _score("unemployment_rate", "unemploymentRate", 6.0),
        _score("poverty_rate", "povertyRate", 15.0),
        _score("growth_potential", "growthPotential", 70.0),
        _score("transportation_score", "transportationScore", 65.0),
        _score("utilities_score", "utilitiesScore", 70.0),
        _score("digital_connectivity", "digitalConnectivity", 65.0),
        _score("education_quality", "educationQuality", 70.0),
        _score("healthcare_access", "healthcareAccess", 65.0),
        _score("housing_availability", "housingAvailability", 60.0),
        _score("ease_of_doing_business", "easeOfDoingBusiness", 65.0),
        _score("regulatory_complexity", "regulatoryComplexity", 45.0),
        _score("corruption_index", "corruptionIndex", 40.0),
        _score("crime_rate", "crimeRate", 35.0),
        _score("political_stability", "politicalStability", 65.0),
        _score("government_efficiency", "governmentEfficiency", 60.0),
        _score("tariff_offsets", "tariffOffsets", 50.0),
        _score("subsidies", "subsidies", 45.0),
        _score("family_separation_risk", "familySeparationRisk", 30.0),
        _score("community_acceptance", "communityAcceptance", 70.0),
        _score("cultural_compatibility", "culturalCompatibility", 70.0),
        _score("labor_rights", "laborRights", 65.0),
        _score("environmental_standards", "environmentalStandards", 60.0),
    ),
}

# nested groups accepted in a regional profile
REGIONAL_GROUPS = frozenset({
    "location",
    "economicProfile",
    "wageLevels",
    "infrastructureReadiness",
    "businessEnvironment",
    "incentivesAndCosts",
    "socialFactors",
    "dataFreshness",
})

DEFAULT_TAX_INCENTIVES: Tuple[float, ...] = (60.0,)
DEFAULT_VERIFICATION = VerificationStatus.ESTIMATED
DEFAULT_PARTNERSHIP_TYPE = PartnershipType.BUSINESS_BUSINESS

PARTNER_SPECS: Tuple[FieldSpec, ...] = (
    _score("commitment", "commitment", 70.0),
    _score("reputation", "reputation", 70.0),
)


def coerce_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (numbers.Real, Decimal)):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def _apply_spec(spec: FieldSpec, raw: Mapping[str, Any]) -> Tuple[float, bool]:
    """Return (value, was_defaulted) for one field."""
    value = raw.get(spec.alias)
    if value is None and spec.name != spec.alias:
        value = raw.get(spec.name)

    number = coerce_number(value)
    defaulted = number is None
    if defaulted:
        number = float(spec.default)

    if spec.minimum is not None:
        number = max(spec.minimum, number)
    if spec.maximum is not None:
        number = min(spec.maximum, number)
    if spec.integer:
        number = int(Decimal(str(number)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return number, defaulted


class ParameterNormalizer:
    """Fill and clamp raw calculator inputs against INPUT_SPECS."""

    def __init__(self, specs: Optional[Dict[type, Tuple[FieldSpec, ...]]] = None):
        self.specs = specs or INPUT_SPECS

    def normalize(self, input_cls: Type[T], raw: Optional[Mapping[str, Any]]) -> T:
        """
        Build a fully-populated input of type input_cls.

        Args:
            input_cls: One of the dataclasses in nexus_engine.models.inputs.
            raw: Raw mapping (may be None, empty, or contain garbage).

        Returns:
            input_cls instance; `defaulted` lists substituted fields.
        """
        special = {
            SEAMInput: self.normalize_seam,
            RegionalProfileInput: self.normalize_regional,
            RegionalCostBenefitInput: self.normalize_cost_benefit,
            PartnershipViabilityInput: self.normalize_partnership,
        }.get(input_cls)
        if special is not None:
            return special(raw)  # type: ignore[return-value]

        if not isinstance(raw, Mapping):
            raw = {}

        values, defaulted = self._apply_specs(input_cls, raw)
        return input_cls(**values, defaulted=tuple(defaulted))

    def _apply_specs(self, input_cls: type, raw: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        values: Dict[str, Any] = {}
        defaulted: List[str] = []
        for spec in self.specs[input_cls]:
            values[spec.name], was_defaulted = _apply_spec(spec, raw)
            if was_defaulted:
                defaulted.append(spec.alias)

        if defaulted:
            logger.debug(
                "inputs_defaulted",
                input_type=input_cls.__name__,
                defaulted=defaulted,
            )
        return values, defaulted

    def normalize_partner(self, raw: Any, index: int) -> Optional[Partner]:
        """Coerce one partner entry; non-mapping entries are dropped."""
        if isinstance(raw, Partner):
            return raw
        if not isinstance(raw, Mapping):
            return None

        name = raw.get("name") or raw.get("entity")
        partner_type = raw.get("type")
        capabilities = raw.get("capabilities")
        numeric = {spec.name: _apply_spec(spec, raw)[0] for spec in PARTNER_SPECS}

        return Partner(
            name=name if isinstance(name, str) and name.strip() else f"Partner {index + 1}",
            type=partner_type if isinstance(partner_type, str) and partner_type.strip() else "Anchor",
            capabilities=[c for c in capabilities if isinstance(c, str)]
            if isinstance(capabilities, (list, tuple))
            else [],
            rationale=raw.get("rationale") if isinstance(raw.get("rationale"), str) else "",
            **numeric,
        )

    def normalize_seam(self, raw: Optional[Mapping[str, Any]]) -> SEAMInput:
        if not isinstance(raw, Mapping):
            raw = {}

        defaulted: List[str] = []
        raw_partners = raw.get("partners")
        if not isinstance(raw_partners, (list, tuple)):
            defaulted.append("partners")
            raw_partners = []

        partners = []
        for i, item in enumerate(raw_partners):
            partner = self.normalize_partner(item, i)
            if partner is None:
                defaulted.append(f"partners[{i}]")
                continue
            partners.append(partner)

        region = raw.get("region")
        industry = raw.get("industry")
        return SEAMInput(
            partners=tuple(partners),
            region=region if isinstance(region, str) else "",
            industry=industry if isinstance(industry, str) else "",
            defaulted=tuple(defaulted),
        )

    # ------------------------------------------------------------------
    # Regional profiles
    # ------------------------------------------------------------------

    @staticmethod
    def flatten_groups(raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge REGIONAL_GROUPS sub-mappings into one flat mapping."""
        flat: Dict[str, Any] = {}
        for key, value in raw.items():
            if key in REGIONAL_GROUPS and isinstance(value, Mapping):
                flat.update(ParameterNormalizer.flatten_groups(value))
            else:
                flat[key] = value
        return flat

    def normalize_regional(self, raw: Optional[Mapping[str, Any]]) -> RegionalProfileInput:
        """
        Profile of one location.

        Tax incentives are a list of 0-100 values; unusable entries are
        dropped and recorded. An explicit empty list means no incentives.
        """
        flat = self.flatten_groups(raw) if isinstance(raw, Mapping) else {}
        values, defaulted = self._apply_specs(RegionalProfileInput, flat)

        raw_incentives = flat.get("taxIncentives")
        if isinstance(raw_incentives, (list, tuple)):
            incentives = []
            for i, item in enumerate(raw_incentives):
                number = coerce_number(item)
                if number is None:
                    defaulted.append(f"taxIncentives[{i}]")
                    continue
                incentives.append(min(max(number, 0.0), 100.0))
            values["tax_incentives"] = tuple(incentives)
        else:
            values["tax_incentives"] = DEFAULT_TAX_INCENTIVES
            defaulted.append("taxIncentives")

        try:
            values["verification_status"] = VerificationStatus(flat.get("verificationStatus"))
        except ValueError:
            values["verification_status"] = DEFAULT_VERIFICATION
            defaulted.append("verificationStatus")

        advantages = flat.get("competitiveAdvantages")
        if isinstance(advantages, Mapping):
            advantages = [item for group in advantages.values() if isinstance(group, (list, tuple)) for item in group]
        values["competitive_advantages"] = tuple(
            item for item in advantages if isinstance(item, str)
        ) if isinstance(advantages, (list, tuple)) else ()

        city = flat.get("city")
        values["city"] = city if isinstance(city, str) else ""
        return RegionalProfileInput(**values, defaulted=tuple(defaulted))

    def normalize_cost_benefit(self, raw: Optional[Mapping[str, Any]]) -> RegionalCostBenefitInput:
        """
        {regionalData, investment, alternatives[]}. When regionalData or
        investment is absent the top-level mapping is read instead.
        """
        if not isinstance(raw, Mapping):
            raw = {}
        regional_raw = raw.get("regionalData")
        investment_raw = raw.get("investment")
        region = self.normalize_regional(regional_raw if isinstance(regional_raw, Mapping) else raw)
        investment = self.normalize(
            InvestmentInput, investment_raw if isinstance(investment_raw, Mapping) else raw
        )

        defaulted = list(region.defaulted) + list(investment.defaulted)
        alternatives = []
        raw_alternatives = raw.get("alternatives")
        if isinstance(raw_alternatives, (list, tuple)):
            for i, item in enumerate(raw_alternatives):
                if not isinstance(item, Mapping):
                    defaulted.append(f"alternatives[{i}]")
                    continue
                alternatives.append(self.normalize_regional(item))

        return RegionalCostBenefitInput(
            region=region,
            investment=investment,
            alternatives=tuple(alternatives),
            defaulted=tuple(defaulted),
        )

    def normalize_partnership(self, raw: Optional[Mapping[str, Any]]) -> PartnershipViabilityInput:
        if not isinstance(raw, Mapping):
            raw = {}
        regional_raw = raw.get("regionalData")
        region = self.normalize_regional(regional_raw if isinstance(regional_raw, Mapping) else raw)
        defaulted = list(region.defaulted)

        try:
            partnership_type = PartnershipType(raw.get("partnershipType"))
        except ValueError:
            partnership_type = DEFAULT_PARTNERSHIP_TYPE
            defaulted.append("partnershipType")

        deal_parameters = raw.get("dealParameters")
        return PartnershipViabilityInput(
            partnership_type=partnership_type,
            region=region,
            deal_parameters=dict(deal_parameters) if isinstance(deal_parameters, Mapping) else {},
            defaulted=tuple(defaulted),
        )

    def field_count(self, input_cls: type) -> int:
        if input_cls is RegionalProfileInput:
            # plus taxIncentives and verificationStatus
            return len(self.specs[RegionalProfileInput]) + 2
        if input_cls is RegionalCostBenefitInput:
            return self.field_count(RegionalProfileInput) + len(self.specs[InvestmentInput])
        if input_cls is PartnershipViabilityInput:
            return self.field_count(RegionalProfileInput) + 1
        return len(self.specs.get(input_cls, ()))


_default_normalizer = ParameterNormalizer()


def normalize_input(input_cls: Type[T], raw: Optional[Mapping[str, Any]]) -> T:
    """Normalize with the module default specs."""
    return _default_normalizer.normalize(input_cls, raw)


def ensure_input(input_cls: Type[T], data: Any) -> T:
    """Pass typed inputs through; normalize anything else."""
    if isinstance(data, input_cls):
        return data
    return normalize_input(input_cls, data)


def normalized_values(data: Any) -> Dict[str, Any]:
    """Wire-named field values of a normalized input."""
    return {spec.alias: getattr(data, spec.name) for spec in _default_normalizer.specs[type(data)]}
