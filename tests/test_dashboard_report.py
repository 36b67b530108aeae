from datetime import timezone

from backend.reporting import generate_dashboard_report_pdf, period_label
from backend.services.dashboard_service import DashboardSession
from shared.models import DashboardFilters
from tests.fakes import PAYCHECK, RENT, FakeTransactionsRepository


def _view(rows, filters: DashboardFilters):
    session = DashboardSession(FakeTransactionsRepository(rows=list(rows)), filters=filters, tz=timezone.utc)
    session.refresh()
    return session.view()


def test_period_label_variants() -> None:
    assert period_label(DashboardFilters(month=0, year=2025)) == "January 2025"
    assert period_label(DashboardFilters()) == "All Months All Years"
    assert period_label(DashboardFilters(month=11, search="rent")) == 'December All Years - matching "rent"'


def test_generate_dashboard_report_pdf_with_breakdown() -> None:
    pdf_bytes = generate_dashboard_report_pdf(_view([RENT, PAYCHECK], DashboardFilters(month=0, year=2025)))

    assert pdf_bytes.startswith(b"%PDF")
    assert len(pdf_bytes) > 1000


def test_generate_dashboard_report_pdf_without_expenses() -> None:
    pdf_bytes = generate_dashboard_report_pdf(
        _view([PAYCHECK], DashboardFilters(month=0, year=2025, search="<pay & co>"))
    )

    assert pdf_bytes.startswith(b"%PDF")


def test_generate_dashboard_report_pdf_for_empty_period() -> None:
    pdf_bytes = generate_dashboard_report_pdf(_view([], DashboardFilters(month=5, year=2024)))

    assert pdf_bytes.startswith(b"%PDF")


def test_generate_dashboard_report_pdf_with_zero_amount_expense() -> None:
    repository = FakeTransactionsRepository(rows=[PAYCHECK])
    session = DashboardSession(repository, filters=DashboardFilters(month=0, year=2025), tz=timezone.utc)
    session.refresh()
    session.update_draft(description="Free sample", amount="0", category="Food", type="expense")
    session.submit()
    view = session.view()

    assert [(row.category, row.percentage) for row in view.breakdown] == [("Food", 0.0)]
    assert generate_dashboard_report_pdf(view).startswith(b"%PDF")
