"""Pure derivation pipeline: filter, aggregate and categorize the mirror."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from decimal import Decimal
from typing import Iterable, Sequence

from shared.models import (
    CategoryBreakdownRow,
    DashboardFilters,
    Totals,
    Transaction,
    TransactionType,
)


CATEGORY_PALETTE: tuple[str, ...] = (
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#f43f5e",
    "#f59e0b",
    "#10b981",
    "#06b6d4",
)


@dataclass(slots=True, frozen=True)
class DerivedView:
    """Derived views recomputed from (mirror, filters)."""

    transactions: tuple[Transaction, ...]
    totals: Totals
    breakdown: tuple[CategoryBreakdownRow, ...]


def matches_filters(transaction: Transaction, filters: DashboardFilters, *, tz: tzinfo | None = None) -> bool:
    """Return True when the transaction satisfies month, year and search criteria."""

    local_created_at = transaction.created_at.astimezone(tz)
    if filters.month is not None and local_created_at.month - 1 != filters.month:
        return False
    if filters.year is not None and local_created_at.year != filters.year:
        return False
    if filters.search and filters.search.lower() not in transaction.description.lower():
        return False
    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    filters: DashboardFilters,
    *,
    tz: tzinfo | None = None,
) -> list[Transaction]:
    """Return the ordered subsequence of transactions matching all filters."""

    return [transaction for transaction in transactions if matches_filters(transaction, filters, tz=tz)]


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    income = Decimal("0")
    expenses = Decimal("0")
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            expenses += transaction.amount
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def build_category_breakdown(
    transactions: Iterable[Transaction],
    expenses: Decimal,
) -> list[CategoryBreakdownRow]:
    """Group expenses by category, largest first, with share of `expenses`.

    `expenses` must be the total computed over the same filtered set. Ties keep
    the order in which categories were first encountered.
    """

    totals_by_category: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        totals_by_category[transaction.category] = (
            totals_by_category.get(transaction.category, Decimal("0")) + transaction.amount
        )

    ordered = sorted(totals_by_category.items(), key=lambda item: item[1], reverse=True)
    rows: list[CategoryBreakdownRow] = []
    for index, (category, total) in enumerate(ordered):
        percentage = float(total / expenses * Decimal("100")) if expenses > 0 else 0.0
        rows.append(
            CategoryBreakdownRow(
                category=category,
                total=total,
                percentage=percentage,
                color=CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)],
            )
        )
    return rows


def derive_view(
    transactions: Sequence[Transaction],
    filters: DashboardFilters,
    *,
    tz: tzinfo | None = None,
) -> DerivedView:
    filtered = filter_transactions(transactions, filters, tz=tz)
    totals = compute_totals(filtered)
    breakdown = build_category_breakdown(filtered, totals.expenses)
    return DerivedView(
        transactions=tuple(filtered),
        totals=totals,
        breakdown=tuple(breakdown),
    )
