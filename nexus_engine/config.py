"""Application configuration with comprehensive validation."""
from typing import Optional, Literal, Dict
from functools import lru_cache
from decimal import Decimal
from pydantic import Field, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# COUNTRY CODE MAPPINGS
# =============================================================================
# Maps a country display name -> ISO3 code used by the World Bank API.
# Region strings are matched against these names (case-insensitive).
# =============================================================================

COUNTRY_CODES: Dict[str, str] = {
    "Philippines": "PHL",
    "Singapore": "SGP",
    "Malaysia": "MYS",
    "Indonesia": "IDN",
    "Thailand": "THA",
    "Vietnam": "VNM",
    "China": "CHN",
    "Japan": "JPN",
    "South Korea": "KOR",
    "India": "IND",
    "United States": "USA",
    "Germany": "DEU",
    "United Kingdom": "GBR",
    "France": "FRA",
    "Australia": "AUS",
}


def get_country_code(region: str) -> Optional[str]:
    """
    Resolve an ISO3 country code from a free-form region string.

    Args:
        region: Region description (e.g. "Cebu, Philippines" or "Vietnam")

    Returns:
        ISO3 code, or None if no supported country is named
    """
    region_lower = (region or "").lower()
    # Longest names first so "South Korea" wins over a shorter partial match
    for name in sorted(COUNTRY_CODES, key=len, reverse=True):
        if name.lower() in region_lower:
            return COUNTRY_CODES[name]
    return None


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Nexus Intelligence Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # RCI weights (must sum to 1.0)
    W_ECONOMIC: float = Field(default=0.25, ge=0.0, le=1.0)
    W_INFRASTRUCTURE: float = Field(default=0.20, ge=0.0, le=1.0)
    W_HUMAN_CAPITAL: float = Field(default=0.20, ge=0.0, le=1.0)
    W_INSTITUTIONS: float = Field(default=0.15, ge=0.0, le=1.0)
    W_INNOVATION: float = Field(default=0.10, ge=0.0, le=1.0)
    W_MARKET_ACCESS: float = Field(default=0.10, ge=0.0, le=1.0)
    RCI_ECONOMIC_CEILING: float = Field(default=1e12, gt=0)

    # Time-to-Profit
    TPP_OPERATING_COST_RATIO: float = Field(default=0.30, ge=0.0, le=1.0)
    TPP_DISCOUNT_RATE: float = Field(default=0.10, ge=0.0, le=1.0)
    TPP_HORIZON_CAP: int = Field(default=10, ge=1, le=50)

    # Monte Carlo
    MONTE_CARLO_ITERATIONS: int = Field(default=1000, ge=1, le=100_000)
    MONTE_CARLO_SEED: Optional[int] = None

    # SEAM: "deterministic" derives drivers from partner attributes,
    # "illustrative" draws them from the random source
    SEAM_MODE: Literal["deterministic", "illustrative"] = "deterministic"

    # Concurrency
    STAGE_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, le=600)
    FETCH_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0, le=120)

    # World Bank
    WORLD_BANK_API_URL: str = "https://api.worldbank.org/v2"
    WORLD_BANK_DATE_RANGE: str = "2018:2023"
    DATA_USER_AGENT: str = "Nexus-Intelligence-Engine/1.0"

    # Redis (indicator cache)
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = False
    CACHE_TTL_INDICATORS: int = 86400  # 24 hours

    # Text generation (OpenAI-compatible chat completions)
    OPENAI_API_KEY: Optional[SecretStr] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    DEFAULT_LLM_MODEL: str = "gpt-4-turbo"
    LLM_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0, le=600)
    MAX_TOKENS_BRIEF: int = 1500
    MAX_TOKENS_STANDARD: int = 3000
    MAX_TOKENS_COMPREHENSIVE: int = 4000

    @model_validator(mode="after")
    def validate_rci_weights(self):
        """Validate RCI weights sum to 1.0."""
        total = sum(self.rci_weights.values())
        if total != Decimal("1"):
            raise ValueError(f"RCI weights must sum to 1.0, got {total}")
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production does not run in debug mode."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self

    @property
    def rci_weights(self) -> Dict[str, Decimal]:
        """Get RCI weights as exact decimals keyed by component name."""
        return {
            "economic": Decimal(str(self.W_ECONOMIC)),
            "infrastructure": Decimal(str(self.W_INFRASTRUCTURE)),
            "human_capital": Decimal(str(self.W_HUMAN_CAPITAL)),
            "institutions": Decimal(str(self.W_INSTITUTIONS)),
            "innovation": Decimal(str(self.W_INNOVATION)),
            "market_access": Decimal(str(self.W_MARKET_ACCESS)),
        }

    @property
    def llm_enabled(self) -> bool:
        return self.OPENAI_API_KEY is not None and bool(self.OPENAI_API_KEY.get_secret_value())

    def max_tokens_for(self, report_length: str) -> int:
        """Token budget per report length; unknown lengths use the standard budget."""
        return {
            "brief": self.MAX_TOKENS_BRIEF,
            "standard": self.MAX_TOKENS_STANDARD,
            "comprehensive": self.MAX_TOKENS_COMPREHENSIVE,
        }.get(report_length, self.MAX_TOKENS_STANDARD)


@lru_cache
def get_settings() -> Settings:
    return Settings()
