"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
    TransactionsRepository,
)
from backend.services.dashboard_service import DashboardSession
from shared import config


logger = logging.getLogger(__name__)


def build_transactions_repository() -> TransactionsRepository:
    """Return the Supabase repository when configured, else the in-memory one."""

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key() or config.supabase_anon_key()
    if supabase_url and supabase_key:
        supabase_client = SupabaseClient(
            settings=SupabaseSettings(
                url=supabase_url,
                service_role_key=supabase_key,
            )
        )
        return SupabaseTransactionsRepository(client=supabase_client, table=config.transactions_table())

    logger.warning("supabase_not_configured using in-memory transactions repository")
    return InMemoryTransactionsRepository()


def build_dashboard_session(repository: TransactionsRepository | None = None) -> DashboardSession:
    """Build a dashboard session and load its mirror once."""

    session = DashboardSession(
        repository or build_transactions_repository(),
        tz=config.dashboard_timezone(),
        years=config.dashboard_years(),
        currency_symbol=config.currency_symbol(),
    )
    session.refresh()
    return session
