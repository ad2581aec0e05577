"""Display helpers for journal values.

Nothing here feeds back into calculations. Persian (``fa``) is the
default locale; ``en`` is also supported.
"""

from datetime import datetime
from typing import Optional

SUPPORTED_LOCALES = ("fa", "en")

# Indexed by datetime.weekday(), Monday first
WEEKDAY_NAMES = {
    "fa": ["دوشنبه", "سه‌شنبه", "چهارشنبه", "پنجشنبه", "جمعه", "شنبه", "یکشنبه"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}

_PERSIAN_DIGITS = str.maketrans("0123456789,.-", "۰۱۲۳۴۵۶۷۸۹٬٫−")

OUTCOME_DISPLAY = {
    "win": {"icon": "🟢", "style": "green"},
    "loss": {"icon": "🔴", "style": "red"},
    "neutral": {"icon": "⚪", "style": "dim"},
}


def _check_locale(locale: str) -> str:
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"Unsupported locale: {locale}. Must be one of {SUPPORTED_LOCALES}")
    return locale


def weekday_label(moment: datetime, locale: str = "fa") -> str:
    """Return the localized weekday name of a timestamp."""
    return WEEKDAY_NAMES[_check_locale(locale)][moment.weekday()]


def format_number(num: float, locale: str = "fa", max_decimals: int = 3) -> str:
    """Format a number with thousands grouping.

    Trailing fractional zeros are dropped, so ``1500.0`` renders as
    ``1,500`` (``۱٬۵۰۰`` in Persian).

    Args:
        num: Number to format.
        locale: Output locale.
        max_decimals: Maximum number of fraction digits.

    Returns:
        The formatted number.
    """
    _check_locale(locale)
    text = f"{num:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    if locale == "fa":
        return text.translate(_PERSIAN_DIGITS)
    return text


def format_currency(num: float, currency: str, locale: str = "fa") -> str:
    return f"{format_number(num, locale)} {currency}"


def format_percentage(num: float, decimals: int = 2, locale: str = "fa") -> str:
    return f"{format_number(round(num, decimals), locale, max_decimals=decimals)}%"


def format_entry_date(moment: datetime, show_time: bool) -> str:
    """Render an entry timestamp, hiding the time of day unless flagged."""
    if show_time:
        return moment.strftime("%Y-%m-%d %H:%M")
    return moment.strftime("%Y-%m-%d")


def value_style(value: Optional[float]) -> str:
    """Rich style for a signed value (P&L, percentage)."""
    if value is None or value == 0:
        return "dim"
    return "green" if value > 0 else "red"


def outcome_display(outcome: str) -> dict:
    """Icon and rich style for a trade outcome."""
    return OUTCOME_DISPLAY.get(outcome, OUTCOME_DISPLAY["neutral"])
