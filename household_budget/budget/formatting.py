"""
Money and percentage formatting

Locale and currency are always passed in. Nothing here reads a cookie,
a request or a global "current locale".

Supported locales: "en" (1,234.56) and "es" (1.234,56).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


FALLBACK_CURRENCY = "MXN"

# locale -> (thousands separator, decimal separator, currency code goes first)
_LOCALE_FORMATS = {
    "en": (",", ".", True),
    "es": (".", ",", False),
}


class UnsupportedLocaleError(ValueError):
    """Locale has no number format."""

    def __init__(self, locale: str):
        self.locale = locale
        super().__init__(f"Unsupported locale: {locale!r} (expected one of {sorted(_LOCALE_FORMATS)})")


def _separators(locale: str) -> tuple[str, str, bool]:
    try:
        return _LOCALE_FORMATS[locale]
    except KeyError:
        raise UnsupportedLocaleError(locale)


def _group(digits: str, separator: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


def format_number(value: Decimal, locale: str, places: int = 2) -> str:
    """Format a decimal with the locale's separators (no currency)."""
    thousands, decimal_sep, _ = _separators(locale)
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    integer, _, fraction = f"{abs(rounded):f}".partition(".")
    text = _group(integer, thousands)
    if places > 0:
        text = f"{text}{decimal_sep}{fraction}"
    return f"{sign}{text}"


def format_currency(amount_minor: int, currency: str, locale: str) -> str:
    """
    Format an amount in minor units.

    >>> format_currency(123456, "MXN", "en")
    'MXN 1,234.56'
    >>> format_currency(123456, "EUR", "es")
    '1.234,56 EUR'
    """
    _, _, code_first = _separators(locale)
    amount = Decimal(amount_minor).scaleb(-2)
    number = format_number(amount, locale)
    code = currency.strip().upper()

    if code_first:
        if number.startswith("-"):
            return f"-{code} {number[1:]}"
        return f"{code} {number}"
    return f"{number} {code}"


def format_percent(value: float, locale: str) -> str:
    """
    Format a ratio (0.42 -> 42%) with no decimals.

    >>> format_percent(0.425, "es")
    '43 %'
    """
    _, _, code_first = _separators(locale)
    number = format_number(Decimal(str(value)) * 100, locale, places=0)
    return f"{number}%" if code_first else f"{number} %"


def workspace_currency(default_currency: Optional[str]) -> str:
    """The workspace's currency, falling back to MXN when unset or blank."""
    return (default_currency or "").strip().upper() or FALLBACK_CURRENCY
