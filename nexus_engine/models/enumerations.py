from enum import Enum


class CalculatorKind(str, Enum):
    RCI = "rci"
    ROI = "roi"
    TPP = "tpp"
    SEAM = "seam"
    RISK = "risk"
    MONTE_CARLO = "monte_carlo"
    DEAL_SUCCESS = "deal_success"
    TRUST = "trust"
    INVESTMENT_ATTRACTION = "investment_attraction"
    COMPETITION = "competition"
    COMPREHENSIVE_REGIONAL = "comprehensive_regional"
    REGIONAL_COST_BENEFIT = "regional_cost_benefit"
    PARTNERSHIP_VIABILITY = "partnership_viability"


class PipelineStage(str, Enum):
    DIAGNOSE = "diagnose"
    SIMULATE = "simulate"
    ARCHITECT = "architect"


class Indicator(str, Enum):
    """World Bank indicator codes gathered before diagnosis."""
    GDP = "NY.GDP.MKTP.CD"
    POPULATION = "SP.POP.TOTL"
    INFLATION = "FP.CPI.TOTL.ZG"
    FDI = "BX.KLT.DINV.CD.WD"
    GDP_GROWTH = "NY.GDP.MKTP.KD.ZG"
    TRADE_BALANCE = "NE.RSB.GNFS.CD"


class ReportLength(str, Enum):
    BRIEF = "brief"
    STANDARD = "standard"
    COMPREHENSIVE = "comprehensive"


class SEAMMode(str, Enum):
    DETERMINISTIC = "deterministic"  # drivers derived from partner attributes
    ILLUSTRATIVE = "illustrative"    # drivers drawn from the random source


class PartnershipType(str, Enum):
    GOV_GOV = "gov-gov"
    GOV_BUSINESS = "gov-business"
    BUSINESS_BUSINESS = "business-business"
    BANKING = "banking"
    CROSS_SECTOR = "cross-sector"


class VerificationStatus(str, Enum):
    """How current a regional profile's data is."""
    VERIFIED = "verified"
    ESTIMATED = "estimated"
    OUTDATED = "outdated"
