"""Tests for shared configuration helpers."""

from zoneinfo import ZoneInfo

from shared import config


def test_cors_allow_origins_defaults_in_dev(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    assert config.cors_allow_origins() == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_cors_allow_origins_parses_comma_separated_list(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com")

    assert config.cors_allow_origins() == ["https://a.com", "https://b.com"]


def test_cors_allow_origins_uses_ui_origin_in_prod(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.setenv("UI_ORIGIN", "https://finance-pro.example.com")

    assert config.cors_allow_origins() == ["https://finance-pro.example.com"]


def test_cors_allow_origins_warns_and_defaults_to_empty_in_prod(monkeypatch, caplog) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("UI_ORIGIN", raising=False)

    assert config.cors_allow_origins() == []
    assert "cors_allow_origins_empty_in_prod" in caplog.text


def test_transactions_table_defaults(monkeypatch) -> None:
    monkeypatch.delenv("TRANSACTIONS_TABLE", raising=False)

    assert config.transactions_table() == "transactions"


def test_dashboard_years_defaults_and_parses_list(monkeypatch) -> None:
    monkeypatch.delenv("DASHBOARD_YEARS", raising=False)
    assert config.dashboard_years() == [2024, 2025, 2026]

    monkeypatch.setenv("DASHBOARD_YEARS", "2026, 2023,oops,2026")
    assert config.dashboard_years() == [2023, 2026]


def test_dashboard_timezone_resolves_zone_or_falls_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv("DASHBOARD_TIMEZONE", "Europe/Zurich")
    assert config.dashboard_timezone() == ZoneInfo("Europe/Zurich")

    monkeypatch.setenv("DASHBOARD_TIMEZONE", "Not/AZone")
    assert config.dashboard_timezone() is None
    assert "dashboard_timezone_invalid" in caplog.text

    monkeypatch.delenv("DASHBOARD_TIMEZONE", raising=False)
    assert config.dashboard_timezone() is None


def test_currency_symbol_defaults(monkeypatch) -> None:
    monkeypatch.delenv("DASHBOARD_CURRENCY_SYMBOL", raising=False)

    assert config.currency_symbol() == "$"
