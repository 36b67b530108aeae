"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_DEFAULT_YEARS = (2024, 2025, 2026)


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def supabase_anon_key() -> str | None:
    """Return Supabase anon key when configured."""
    return get_env("SUPABASE_ANON_KEY")


def transactions_table() -> str:
    """Return the PostgREST table holding transactions."""
    return (get_env("TRANSACTIONS_TABLE", "transactions") or "transactions").strip() or "transactions"


def dashboard_timezone() -> tzinfo | None:
    """Return the zone used for month/year filtering, or None for host local time."""
    raw_value = (get_env("DASHBOARD_TIMEZONE", "") or "").strip()
    if not raw_value:
        return None
    try:
        return ZoneInfo(raw_value)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("dashboard_timezone_invalid value=%s; falling back to local time", raw_value)
        return None


def dashboard_years() -> list[int]:
    """Return the selectable years for the year filter."""
    raw_value = (get_env("DASHBOARD_YEARS", "") or "").strip()
    if not raw_value:
        return list(_DEFAULT_YEARS)

    years: list[int] = []
    for chunk in raw_value.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            years.append(int(chunk))
        except ValueError:
            logger.warning("dashboard_years_invalid_entry value=%s", chunk)
    return sorted(set(years)) or list(_DEFAULT_YEARS)


def currency_symbol() -> str:
    """Return the currency symbol used for display amounts."""
    return get_env("DASHBOARD_CURRENCY_SYMBOL", "$") or "$"
