from .formatting import format_currency, format_date, last_four, parse_amount, to_decimal
from .timestamp import parse_timestamp, to_utc

__all__ = [
    "format_currency",
    "format_date",
    "last_four",
    "parse_amount",
    "to_decimal",
    "parse_timestamp",
    "to_utc",
]
