"""Box 3 rate tables and year lookups."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from box3_validator.config import settings

logger = logging.getLogger(__name__)

RATES_FILENAME = "box3_rates.json"


class DeemedReturnRates(BaseModel):
    """Forfaitaire percentages for one year (in percent, not fractions)."""

    savings: float
    investments: float
    debts: float
    exempt_amount: float


class RateTables(BaseModel):
    """Constant tables keyed by tax year string."""

    tax_rates: dict[str, float] = Field(default_factory=dict)
    average_savings_rates: dict[str, float] = Field(default_factory=dict)
    deemed_return_rates: dict[str, DeemedReturnRates] = Field(default_factory=dict)


class RateLookup(BaseModel):
    """Result of a year lookup in a rate table.

    ``found`` is False when the year is absent and ``rate`` holds the
    default instead.
    """

    model_config = ConfigDict(frozen=True)

    year: Optional[str]
    rate: float
    found: bool

    @property
    def is_fallback(self) -> bool:
        return not self.found


def rate_for(
    table: dict[str, float],
    year: Union[str, int, None],
    default: float,
) -> RateLookup:
    """Look up the rate for a tax year, falling back to ``default``.

    Args:
        table: Rate table keyed by year string
        year: Tax year (string or int); None always falls back
        default: Rate used when the year is not in the table

    Returns:
        RateLookup with the rate used and whether the year was found
    """
    key = str(year) if year is not None else None
    if key is not None and key in table:
        return RateLookup(year=key, rate=table[key], found=True)

    logger.debug(f"No rate for year {key}, using default {default}")
    return RateLookup(year=key, rate=default, found=False)


@lru_cache(maxsize=4)
def _load_tables(rates_path: Path) -> RateTables:
    with open(rates_path, "r") as f:
        raw = json.load(f)
    tables = RateTables.model_validate(raw)
    logger.debug(
        f"Loaded Box 3 rate tables from {rates_path}: "
        f"{len(tables.tax_rates)} tax rates, "
        f"{len(tables.average_savings_rates)} savings rates"
    )
    return tables


def load_rate_tables(data_dir: Optional[Path] = None) -> RateTables:
    """Load the bundled rate tables (cached per path).

    Args:
        data_dir: Directory holding ``box3_rates.json`` (default: settings.data_dir)

    Raises:
        FileNotFoundError: If the rates file is missing
    """
    rates_path = (data_dir or settings.data_dir) / RATES_FILENAME
    return _load_tables(rates_path)
