"""Display formatting for amounts, percentages and dates."""

from __future__ import annotations

from datetime import datetime, tzinfo
from decimal import Decimal, ROUND_HALF_UP

from shared.models import MONTH_NAMES, TransactionType


_CENT = Decimal("0.01")


def format_money(value: Decimal, symbol: str = "$") -> str:
    """Format an amount as currency with two fraction digits, e.g. '$1,234.56'."""

    quantized = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    if quantized < 0:
        return f"-{symbol}{abs(quantized):,.2f}"
    return f"{symbol}{quantized:,.2f}"


def format_signed(amount: Decimal, transaction_type: TransactionType, symbol: str = "$") -> str:
    """Prefix the amount with + for income and - for expense."""

    sign = "+" if transaction_type == TransactionType.INCOME else "-"
    return f"{sign}{format_money(abs(amount), symbol)}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_short_date(moment: datetime, tz: tzinfo | None = None) -> str:
    """Format a timestamp as 'Jan 5, 2025' in the dashboard's local zone."""

    local = moment.astimezone(tz)
    return f"{MONTH_NAMES[local.month - 1][:3]} {local.day}, {local.year}"
