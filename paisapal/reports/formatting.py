"""Display helpers: currency, dates and the month picker."""

from datetime import date
from decimal import Decimal
from typing import Optional

from paisapal.models.ledger import month_key, parse_month_key
from paisapal.models.report import MonthOption
from paisapal.recurrence.engine import add_months


def format_currency(amount: Optional[Decimal], symbol: str = "£") -> str:
    """Format an amount like ``£1,234.50`` (negatives as ``-£12.00``)."""
    value = amount if amount is not None else Decimal("0")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_display_date(day: date) -> str:
    """Format a date the British way, ``dd/mm/yyyy``."""
    return day.strftime("%d/%m/%Y")


def month_label(key: str) -> str:
    """``2025-03`` -> ``March 2025``."""
    return parse_month_key(key).strftime("%B %Y")


def month_options(today: Optional[date] = None, window: int = 6) -> list[MonthOption]:
    """
    Months offered by the picker: ``window`` months either side of today.
    """
    today = today or date.today()
    first = add_months(today.replace(day=1), -window)
    options = []
    for offset in range(window * 2 + 1):
        key = month_key(add_months(first, offset))
        options.append(MonthOption(key=key, label=month_label(key)))
    return options
