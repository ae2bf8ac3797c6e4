"""Decimal helpers for money and distance arithmetic."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

# Standard precision for financial amounts (2 decimal places)
FINANCIAL_PRECISION = Decimal("0.01")
WHOLE_DOLLAR = Decimal("1")

Number = Union[str, int, float, Decimal]


def parse_decimal(value: Optional[Number], precision: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Parse a value to Decimal, optionally quantizing it.

    Floats go through ``str()`` first so 0.1 stays 0.1 instead of its binary
    expansion.

    Args:
        value: Value to parse (string, int, float, or Decimal)
        precision: Optional quantum to round to (half-up)

    Returns:
        Decimal value or None if parsing fails

    Example:
        >>> parse_decimal("123.456", precision=Decimal("0.01"))
        Decimal('123.46')
    """
    if value is None:
        return None

    if isinstance(value, bool):
        logger.warning("Refusing to parse boolean as decimal", value=value)
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        try:
            result = Decimal(str(value))
        except (ValueError, InvalidOperation) as e:
            logger.warning("Failed to convert numeric value to Decimal", value=value, error=str(e))
            return None
    elif isinstance(value, str):
        value = value.strip().replace(",", "").lstrip("$")
        if not value:
            return None
        try:
            result = Decimal(value)
        except (ValueError, InvalidOperation) as e:
            logger.warning("Failed to parse decimal string", value=value, error=str(e))
            return None
    else:
        logger.warning("Unsupported type for decimal parsing", value=value, type=type(value).__name__)
        return None

    if not result.is_finite():
        logger.warning("Non-finite decimal value rejected", value=str(result))
        return None

    if precision is not None:
        result = result.quantize(precision, rounding=ROUND_HALF_UP)

    return result


def to_decimal(value: Number) -> Decimal:
    """Like :func:`parse_decimal` but raises ``ValueError`` instead of returning None."""
    result = parse_decimal(value)
    if result is None:
        raise ValueError(f"Not a decimal amount: {value!r}")
    return result


def parse_financial_amount(value: Optional[Number]) -> Optional[Decimal]:
    """
    Parse a financial amount with 2 decimal place precision.

    Example:
        >>> parse_financial_amount("$1,000.005")
        Decimal('1000.01')
    """
    return parse_decimal(value, precision=FINANCIAL_PRECISION)


def round_half_up(value: Decimal, decimal_places: int = 0) -> Decimal:
    """
    Round half away from zero for positive values, the way a checkout total is rounded.

    Python's ``round()`` uses banker's rounding, which turns 2.5 into 2.

    Example:
        >>> round_half_up(Decimal("2.5"))
        Decimal('3')
        >>> round_half_up(Decimal("12.345"), 1)
        Decimal('12.3')
    """
    quantum = WHOLE_DOLLAR if decimal_places == 0 else Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def decimal_to_float(value: Optional[Decimal]) -> Optional[float]:
    """Convert Decimal to float for JSON responses. None passes through."""
    if value is None:
        return None
    return float(value)


def format_currency(value: Union[Decimal, float, int]) -> str:
    """
    Render an amount the way it is shown to patients.

    Whole-dollar amounts drop the cents.

    Example:
        >>> format_currency(Decimal("1250"))
        '$1,250'
        >>> format_currency(12.5)
        '$12.50'
    """
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return f"${int(amount):,}"
    return f"${amount.quantize(FINANCIAL_PRECISION, rounding=ROUND_HALF_UP):,}"
