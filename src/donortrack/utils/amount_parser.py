"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

_CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse a currency amount string into a Decimal in major units.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    amount_str = str(amount_str).strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units (cents), rounding half up.

    Raises:
        ValueError: If the amount is out of range for the current decimal context
    """
    try:
        return int((amount / _CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValueError(f"Amount {amount} is out of range")


def parse_amount_minor_units(amount_str: str) -> int:
    """Parse a currency amount string straight into integer minor units.

    >>> parse_amount_minor_units("$100.00")
    10000
    """
    return to_minor_units(parse_amount(amount_str))


def format_minor_units(amount: int) -> str:
    """Render minor units as a currency string, e.g. 10000 -> "$100.00"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount) / 100:,.2f}"
