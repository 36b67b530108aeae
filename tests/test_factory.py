"""Integration-like tests for the backend composition root."""

from backend import factory
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
)


def test_build_transactions_repository_without_supabase_uses_in_memory(monkeypatch, caplog) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    repository = factory.build_transactions_repository()

    assert isinstance(repository, InMemoryTransactionsRepository)
    assert "supabase_not_configured" in caplog.text


def test_build_transactions_repository_with_supabase(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role")
    monkeypatch.setenv("TRANSACTIONS_TABLE", "ledger")

    repository = factory.build_transactions_repository()

    assert isinstance(repository, SupabaseTransactionsRepository)


def test_build_dashboard_session_loads_mirror(monkeypatch) -> None:
    monkeypatch.setenv("DASHBOARD_YEARS", "2025")
    monkeypatch.setenv("DASHBOARD_CURRENCY_SYMBOL", "CHF ")

    session = factory.build_dashboard_session(InMemoryTransactionsRepository())
    view = session.view()

    assert view.loading is False
    assert view.options.years == [2025]
    assert view.totals.display_balance == "CHF 0.00"
