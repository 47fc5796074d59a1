"""Currency, date and text helpers used by the invoice layout."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Union

from dateutil import parser as dateutil_parser

CURRENCY_SYMBOLS: Dict[str, str] = {
    "usd": "$",
    "eur": "€",
    "gbp": "£",
    "cad": "CA$",
    "aud": "A$",
}

Number = Union[int, str, Decimal]

ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}\Z")


def _require_cents(value: Any, name: str = "cents") -> int:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer number of cents, got {type(value).__name__}")
    return value


def currency_symbol(currency: str) -> str:
    code = (currency or "").strip()
    return CURRENCY_SYMBOLS.get(code.lower(), code.upper())


def format_currency(cents: int, currency: str = "usd") -> str:
    """Format an integer amount of minor units, e.g. ``150075`` -> ``$1,500.75``.

    Unknown currency codes use the uppercased code as their symbol. Negative
    amounts put the sign in front of the symbol.
    """
    cents = _require_cents(cents)
    symbol = currency_symbol(currency)
    whole, fraction = divmod(abs(cents), 100)
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{whole:,}.{fraction:02d}"


def round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value, 4.4 -> Decimal("4.4")
        result = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def dollars_to_cents(amount: Number) -> int:
    return round_cents(to_decimal(amount) * 100)


def line_item_total(quantity: int, unit_amount_cents: int) -> int:
    return _require_cents(quantity, "quantity") * _require_cents(unit_amount_cents, "unit_amount_cents")


def calculate_subtotal(items: Iterable[Any]) -> int:
    return sum(line_item_total(item.quantity, item.unit_amount_cents) for item in items)


def percentage_of(cents: int, percent: Number) -> int:
    return round_cents(Decimal(_require_cents(cents)) * to_decimal(percent) / 100)


def fmt_percent(percent: Number) -> str:
    value = to_decimal(percent).normalize()
    return f"{value:f}"


def fmt_date(raw: str) -> str:
    """Turn a full ISO date (``2025-03-14``) into 'Mar 14, 2025'.

    Anything else is already a display string and is returned unchanged.
    """
    raw = raw.strip()
    if not ISO_DATE.match(raw):
        return raw
    try:
        return dateutil_parser.isoparse(raw).strftime("%b %d, %Y")
    except (ValueError, OverflowError):
        return raw


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip() != ""]
