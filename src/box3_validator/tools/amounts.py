"""Amount normalization and Dutch currency formatting."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def parse_amount_string(value: str) -> float:
    """Parse a monetary string to float.

    Accepts both Dutch ("€ 1.234,56") and English ("1,234.56") notation.
    The last separator that is followed by one or two digits is taken as
    the decimal separator.

    Args:
        value: String that may contain currency symbols and grouping

    Returns:
        Parsed float

    Raises:
        ValueError: If the string does not contain a number
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected string, got {type(value)}")

    cleaned = value.replace("€", "").replace("EUR", "").replace(" ", "").replace("\u00a0", "")
    cleaned = cleaned.replace(",-", "").strip()

    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            # Dutch: 1.234,56
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        head, _, tail = cleaned.rpartition(",")
        if len(tail) in (1, 2):
            cleaned = head.replace(",", "") + "." + tail
        else:
            cleaned = cleaned.replace(",", "")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    try:
        return float(cleaned)
    except ValueError as e:
        raise ValueError(f"Could not parse amount string '{value}': {e}") from e


def extract_amount(field: Any) -> Optional[float]:
    """Normalize any blueprint money field to a float.

    Blueprint fields come as a bare number, a numeric string, a data point
    (``{"amount": ...}`` or ``{"value": ...}``, dict or model) or nothing.
    Every read of a monetary field goes through this function.

    Returns:
        The amount, or None when the field is absent or unreadable
    """
    if field is None or isinstance(field, bool):
        return None

    if isinstance(field, (int, float)):
        return float(field)

    if isinstance(field, str):
        if not field.strip():
            return None
        try:
            return parse_amount_string(field)
        except ValueError:
            logger.debug(f"Ignoring unparseable amount {field!r}")
            return None

    if isinstance(field, dict):
        raw = field.get("amount")
        if raw is None:
            raw = field.get("value")
        return extract_amount(raw)

    # Data point models expose amount/value attributes
    raw = getattr(field, "amount", None)
    if raw is None:
        raw = getattr(field, "value", None)
    if raw is None:
        return None
    return extract_amount(raw)


def is_recorded(field: Any) -> bool:
    """Whether a field carries a recorded value.

    A data point with an amount counts as recorded, even when that amount is
    zero. A bare number only counts when it is positive, since extraction
    writes 0 for "not found".
    """
    amount = extract_amount(field)
    if amount is None:
        return False
    if isinstance(field, (int, float, str)):
        return amount > 0
    return True


def round_money(value: float) -> float:
    """Round to whole cents."""
    # + 0.0 turns -0.0 into 0.0
    return round(value, 2) + 0.0


def format_currency(value: Optional[float], estimated: bool = False) -> str:
    """Format an amount the way nl-NL renders EUR, e.g. ``€ 1.178,00``.

    Args:
        value: Amount in EUR, None renders as an em-dash placeholder
        estimated: Prefix with ``~`` for figures that include estimates
    """
    if value is None:
        return "—"

    grouped = f"{abs(value):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if round(value, 2) < 0 else ""
    prefix = "~" if estimated else ""
    return f"{prefix}€ {sign}{grouped}"
