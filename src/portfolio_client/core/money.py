"""Fixed-point money helpers.

All ledger amounts are ``Decimal`` and are rounded half away from zero at the
point they are persisted. Scales:

- currency amounts (gross, fees, net cash, native amounts): 2
- FX-converted base-currency amounts: 4
- price per share: 4
- share quantities: 6
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from portfolio_client.core.exceptions import ValidationError

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

AMOUNT_PLACES = 2
BASE_AMOUNT_PLACES = 4
PRICE_PLACES = 4
QUANTITY_PLACES = 6

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")

Numeric = Union[Decimal, int, str]


def round_to(value: Numeric, places: int) -> Decimal:
    """Round to ``places`` decimal places, half away from zero."""
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def round_amount(value: Numeric) -> Decimal:
    return round_to(value, AMOUNT_PLACES)


def round_base(value: Numeric) -> Decimal:
    return round_to(value, BASE_AMOUNT_PLACES)


def round_price(value: Numeric) -> Decimal:
    return round_to(value, PRICE_PLACES)


def round_quantity(value: Numeric) -> Decimal:
    return round_to(value, QUANTITY_PLACES)


def parse_decimal(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse user-typed numeric text.

    Surrounding whitespace and ``,`` thousands separators are removed.
    Returns None for empty, non-numeric, NaN or infinite input.
    """
    if text is None:
        return None
    cleaned = text.strip().replace(",", "")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def normalize_currency(code: str) -> str:
    """Upper-case and validate a three-letter ISO currency code."""
    normalized = (code or "").strip().upper()
    if not _CURRENCY_CODE.match(normalized):
        raise ValidationError(f"Invalid currency code: {code!r}", field="currency")
    return normalized


def percent_of(value: Decimal, baseline: Decimal) -> Decimal:
    """Return ``value / baseline * 100``, or 0 when the baseline is zero."""
    if baseline == ZERO:
        return ZERO
    return value / baseline * HUNDRED
