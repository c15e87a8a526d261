import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

# leading decimal number, as a spreadsheet's "3.5 EUR" or "12.5abc" carries it
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalise aware ones."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def minor_from_price(price) -> int:
    """Decimal currency -> integer minor units, round half away from zero.

    Only the leading number is read, so trailing text such as a currency code
    is ignored. Input that does not start with a number counts as 0.
    """
    match = _LEADING_NUMBER.match(str(price).strip())
    if match is None:
        return 0
    try:
        return int((Decimal(match.group()) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # exponent too large to represent in minor units
        return 0


def format_minor(minor_units: int, currency: str = "EUR") -> str:
    return f"{Decimal(minor_units) / 100:.2f} {currency}"
