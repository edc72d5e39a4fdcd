"""Formatting helpers for dates, currency amounts and account numbers."""
import logging
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from banking_chatbot.utils.timestamp import parse_timestamp


logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ACCOUNT_MASK = "****"


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a numeric-looking value to a finite Decimal.

    Returns None for missing, non-numeric, NaN or infinite values.
    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


def parse_amount(value: Any) -> float:
    """
    Parse a stored transaction amount.

    Invalid or missing amounts become 0.0 and are logged, so NaN never reaches
    balance or total computations.
    """
    amount = to_decimal(value)
    if amount is None:
        if value is not None:
            logger.warning("Invalid transaction amount %r, using 0", value)
        return 0.0
    result = float(amount)
    if math.isinf(result):
        logger.warning("Transaction amount %r out of range, using 0", value)
        return 0.0
    return result


def format_currency(amount: Any) -> str:
    """Format an amount with exactly two decimal places ("5" -> "5.00", "abc" -> "0.00")."""
    value = to_decimal(amount)
    if value is None:
        return "0.00"
    return f"{value.quantize(CENTS, rounding=ROUND_HALF_UP):f}"


def format_date(value: Any) -> str:
    """Format a date or timestamp as YYYY-MM-DD, or "" when it cannot be parsed."""
    if not value:
        return ""
    try:
        return parse_timestamp(value).date().isoformat()
    except ValueError:
        logger.warning("Invalid date format: %r", value)
        return ""


def last_four(account_number: Any) -> str:
    """Redact an account number down to its last four characters."""
    if not account_number or not isinstance(account_number, str):
        return ACCOUNT_MASK
    return account_number[-4:]
