"""Configuration management for the Box 3 validator."""

from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    # Fees
    cost_per_year: float = Field(
        default=250.0,
        alias="COST_PER_YEAR",
        description="Advisory fee charged per tax year in the objection",
    )
    minimum_profitable_amount: float = Field(
        default=250.0,
        alias="MINIMUM_PROFITABLE_AMOUNT",
        description="Gross refund (EUR) a dossier must exceed to be worth an objection",
    )

    # Rate table fallbacks
    default_tax_rate: float = Field(default=0.31, alias="DEFAULT_TAX_RATE")
    default_savings_rate: float = Field(default=0.001, alias="DEFAULT_SAVINGS_RATE")

    # Partner allocation plausibility
    allocation_tolerance: float = Field(
        default=5.0,
        alias="ALLOCATION_TOLERANCE",
        description="Allowed deviation of the summed allocation percentages from 100",
    )
    allocation_min: float = Field(default=5.0, alias="ALLOCATION_MIN")
    allocation_max: float = Field(default=95.0, alias="ALLOCATION_MAX")

    cap_refund_at_tax_assessed: bool = Field(
        default=True,
        alias="CAP_REFUND_AT_TAX_ASSESSED",
        description="Never report more refund than the Box 3 tax actually assessed",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path(__file__).parent / "data")

    @model_validator(mode="after")
    def check_allocation_bounds(self) -> "Settings":
        """Reject allocation bounds that can never be satisfied."""
        if not 0 <= self.allocation_min < self.allocation_max <= 100:
            raise ValueError(
                f"Invalid allocation bounds: min={self.allocation_min}, max={self.allocation_max}"
            )
        return self

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


# Global settings instance
settings = Settings()
