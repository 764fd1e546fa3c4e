import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from eato.common.constants import DEFAULT_DEPOSIT_PERCENT, DEFAULT_DEPOSIT_UNITS

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"^\d*\.?\d+")


def parse_price(proposed_price: Optional[str]) -> Optional[Decimal]:
    """
    Reads a price out of free text such as "$500 flat fee" or "1,200.50".

    Everything but digits and '.' is dropped, then the leading number of
    what remains is taken. Returns None when nothing positive is left.
    """
    if not proposed_price:
        return None
    cleaned = _NON_NUMERIC.sub("", proposed_price)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    try:
        value = Decimal(match.group(0))
    except InvalidOperation:
        return None
    if value <= 0:
        return None
    return value


def compute_deposit_amount(
    proposed_price: Optional[str],
    percent: float = DEFAULT_DEPOSIT_PERCENT,
    default_units: int = DEFAULT_DEPOSIT_UNITS,
) -> int:
    """Deposit in minor currency units (cents), rounded half-up."""
    price = parse_price(proposed_price)
    if price is None:
        minor = Decimal(default_units) * 100
    else:
        minor = price * Decimal(str(percent)) / 100 * 100
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
