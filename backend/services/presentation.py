"""Build the dashboard view-model from session state and derived views."""

from __future__ import annotations

from datetime import tzinfo

from backend.services.derivation import DerivedView
from shared.formatting import format_money, format_percentage, format_short_date, format_signed
from shared.models import (
    CATEGORIES,
    MONTH_NAMES,
    CategoryBreakdownRow,
    CategoryBreakdownView,
    DashboardFilters,
    DashboardView,
    ErrorPayload,
    FilterOptions,
    FormState,
    Totals,
    TotalsView,
    Transaction,
    TransactionType,
    TransactionView,
)


_CATEGORY_ICONS: dict[str, str] = {
    "Food": "utensils",
    "Transport": "car",
    "Rent": "home",
    "Salary": "briefcase",
}
_DEFAULT_ICON = "tag"


def category_icon(category: str) -> str:
    return _CATEGORY_ICONS.get(category, _DEFAULT_ICON)


def transaction_view(
    transaction: Transaction,
    *,
    editing_id: str | None = None,
    tz: tzinfo | None = None,
    currency_symbol: str = "$",
) -> TransactionView:
    return TransactionView(
        id=transaction.id,
        description=transaction.description,
        amount=transaction.amount,
        category=transaction.category,
        type=transaction.type,
        created_at=transaction.created_at,
        display_amount=format_signed(transaction.amount, transaction.type, currency_symbol),
        display_date=format_short_date(transaction.created_at, tz),
        icon=category_icon(transaction.category),
        is_editing=editing_id is not None and transaction.id == editing_id,
    )


def totals_view(totals: Totals, *, currency_symbol: str = "$") -> TotalsView:
    return TotalsView(
        income=totals.income,
        expenses=totals.expenses,
        balance=totals.balance,
        display_income=f"+{format_money(totals.income, currency_symbol)}",
        display_expenses=f"-{format_money(totals.expenses, currency_symbol)}",
        display_balance=format_money(totals.balance, currency_symbol),
        balance_negative=totals.balance < 0,
    )


def breakdown_view(row: CategoryBreakdownRow, *, currency_symbol: str = "$") -> CategoryBreakdownView:
    return CategoryBreakdownView(
        category=row.category,
        total=row.total,
        percentage=row.percentage,
        color=row.color,
        display_total=format_money(row.total, currency_symbol),
        display_percentage=format_percentage(row.percentage),
    )


def build_dashboard_view(
    *,
    derived: DerivedView,
    filters: DashboardFilters,
    form: FormState,
    loading: bool,
    total_count: int,
    years: list[int],
    error: ErrorPayload | None = None,
    tz: tzinfo | None = None,
    currency_symbol: str = "$",
) -> DashboardView:
    """Assemble the full view rendered by the single-page dashboard."""

    return DashboardView(
        filters=filters,
        options=FilterOptions(
            months=list(MONTH_NAMES),
            years=list(years),
            categories=list(CATEGORIES),
            types=[transaction_type.value for transaction_type in TransactionType],
        ),
        loading=loading,
        form=form,
        transactions=[
            transaction_view(
                transaction,
                editing_id=form.editing_id,
                tz=tz,
                currency_symbol=currency_symbol,
            )
            for transaction in derived.transactions
        ],
        totals=totals_view(derived.totals, currency_symbol=currency_symbol),
        breakdown=[breakdown_view(row, currency_symbol=currency_symbol) for row in derived.breakdown],
        shown_count=len(derived.transactions),
        total_count=total_count,
        error=error,
    )
