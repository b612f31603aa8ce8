# This project was developed with assistance from AI tools.
"""Currency amount parsing and formatting.

Amounts arrive from forms and spreadsheets as text with thousands
separators (``"50,000,000"``). Every call site parses through
``parse_amount`` so malformed input fails the same way everywhere.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CURRENCY_PREFIX = re.compile(r"^\s*UGX\s*", re.IGNORECASE)

MAX_MONETARY_AMOUNT = Decimal("10000000000")


class AmountValidationError(ValueError):
    """Raised when an amount is blank, non-numeric, or out of range."""

    pass


def parse_amount(value: str | int | float | Decimal | None) -> Decimal:
    """Parse a possibly comma-formatted amount into a Decimal.

    Args:
        value: Text such as ``"1,250,000"`` or ``"UGX 500000.50"``, or a number.

    Returns:
        The amount as a Decimal.

    Raises:
        AmountValidationError: If the value is empty or not a finite number.
    """
    if value is None:
        raise AmountValidationError("Amount is required")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = _CURRENCY_PREFIX.sub("", value).replace(",", "").strip()
        if not text:
            raise AmountValidationError("Amount is required")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise AmountValidationError(f"Invalid amount: {value!r}") from exc

    if not amount.is_finite():
        raise AmountValidationError(f"Invalid amount: {value!r}")
    return amount


def parse_optional_amount(value: str | int | float | Decimal | None) -> Decimal | None:
    """Like ``parse_amount`` but returns None for missing or blank input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_amount(value)


def validate_monetary_amount(value: str | int | float | Decimal | None) -> Decimal:
    """Parse an amount entered on a form and enforce basic business limits."""
    amount = parse_amount(value)
    if amount < 0:
        raise AmountValidationError("Amount cannot be negative")
    if amount > MAX_MONETARY_AMOUNT:
        raise AmountValidationError("Amount exceeds maximum allowed value")
    if amount.as_tuple().exponent < -2:
        raise AmountValidationError("Amount can have maximum 2 decimal places")
    return amount


def format_ugx(value: str | int | float | Decimal | None) -> str:
    """Render an amount as ``UGX 1,234,567``; missing or invalid input renders as zero."""
    try:
        amount = parse_amount(value)
    except AmountValidationError:
        return "UGX 0"
    rounded = amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"UGX {rounded:,}"
