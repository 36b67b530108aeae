"""Dashboard session: mirror, filters and form behind explicit actions."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, tzinfo
from typing import Callable

from backend.repositories.transactions_repository import (
    TransactionsRepository,
    WriteResultUnreadableError,
)
from backend.services.derivation import DerivedView, derive_view
from backend.services.presentation import build_dashboard_view
from backend.services.transaction_form import TransactionForm
from shared.errors import FetchFailure, MutationFailure, TransactionNotFoundError
from shared.models import (
    DashboardFilters,
    DashboardView,
    ErrorPayload,
    FormState,
    Transaction,
    TransactionDraft,
)


logger = logging.getLogger(__name__)


class DashboardSession:
    """Single top-level state object for one dashboard.

    Every mutation is followed by a full re-fetch of the mirror; nothing is
    patched locally. Actions hitting the store are serialized so at most one
    fetch is in flight, while reads only wait for the short state lock.
    """

    def __init__(
        self,
        repository: TransactionsRepository,
        *,
        filters: DashboardFilters | None = None,
        tz: tzinfo | None = None,
        years: list[int] | None = None,
        currency_symbol: str = "$",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._tz = tz
        self._currency_symbol = currency_symbol
        self._clock = clock or (lambda: datetime.now(tz))
        self._years = list(years) if years else []
        self._filters = filters or DashboardFilters.for_period_of(self._clock())
        self._form = TransactionForm()
        self._mirror: tuple[Transaction, ...] = ()
        self._revision = 0
        self._loading = True
        self._last_error: ErrorPayload | None = None
        self._derived: tuple[tuple[int, DashboardFilters], DerivedView] | None = None
        self._action_lock = threading.RLock()
        self._state_lock = threading.RLock()

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        with self._state_lock:
            return self._mirror

    @property
    def filters(self) -> DashboardFilters:
        with self._state_lock:
            return self._filters

    @property
    def loading(self) -> bool:
        with self._state_lock:
            return self._loading

    @property
    def last_error(self) -> ErrorPayload | None:
        with self._state_lock:
            return self._last_error

    @property
    def form(self) -> FormState:
        with self._state_lock:
            return self._form.snapshot()

    def refresh(self) -> bool:
        """Replace the mirror with a fresh list from the store.

        Returns False when the fetch failed; the previous mirror is kept and
        the failure is recorded as the session error.
        """

        with self._action_lock:
            with self._state_lock:
                self._loading = True
            try:
                rows = self._repository.list_transactions()
            except Exception as exc:
                logger.exception("dashboard_refresh_failed mirror_size=%s", len(self._mirror))
                with self._state_lock:
                    self._last_error = FetchFailure(str(exc)).to_payload()
                    self._loading = False
                return False

            with self._state_lock:
                self._mirror = tuple(rows)
                self._revision += 1
                self._last_error = None
                self._loading = False
                editing_id = self._form.editing_id
                if editing_id is not None and all(row.id != editing_id for row in self._mirror):
                    self._form.invalidate(editing_id)
                    logger.info("dashboard_edit_session_dropped transaction_id=%s", editing_id)
            logger.info("dashboard_refreshed count=%s revision=%s", len(rows), self._revision)
            return True

    def set_filters(self, filters: DashboardFilters) -> DashboardFilters:
        with self._state_lock:
            self._filters = filters
            return self._filters

    def update_filters(self, **changes: object) -> DashboardFilters:
        """Merge filter changes into the current filters."""

        with self._state_lock:
            merged = DashboardFilters.model_validate({**self._filters.model_dump(), **changes})
            return self.set_filters(merged)

    def derived(self) -> DerivedView:
        """Return derived views, recomputed only when mirror or filters changed."""

        with self._state_lock:
            key = (self._revision, self._filters)
            if self._derived is not None and self._derived[0] == key:
                return self._derived[1]
            derived = derive_view(self._mirror, self._filters, tz=self._tz)
            self._derived = (key, derived)
            return derived

    def start_edit(self, transaction_id: str) -> FormState:
        with self._state_lock:
            for transaction in self._mirror:
                if transaction.id == transaction_id:
                    self._form.start_edit(transaction)
                    return self._form.snapshot()
        raise TransactionNotFoundError("Transaction not found", details={"id": transaction_id})

    def cancel_edit(self) -> FormState:
        with self._state_lock:
            self._form.cancel()
            return self._form.snapshot()

    def update_draft(self, **changes: object) -> TransactionDraft:
        with self._state_lock:
            return self._form.update_draft(**changes)

    def submit(self) -> Transaction | None:
        """Insert or update from the draft, then re-fetch the mirror.

        Returns None when the store applied the write but sent back no readable
        row; the form is still completed and the mirror re-fetched.
        """

        with self._action_lock:
            with self._state_lock:
                payload = self._form.build_payload()
                editing_id = self._form.editing_id

            try:
                if editing_id is None:
                    saved = self._repository.insert_transaction(payload)
                else:
                    saved = self._repository.update_transaction(editing_id, payload)
            except TransactionNotFoundError:
                logger.warning("dashboard_update_target_missing transaction_id=%s", editing_id)
                with self._state_lock:
                    self._form.invalidate(editing_id)
                self.refresh()
                raise
            except WriteResultUnreadableError:
                logger.warning(
                    "dashboard_submit_result_unreadable mode=%s transaction_id=%s",
                    "update" if editing_id else "insert",
                    editing_id,
                )
                saved = None
            except Exception as exc:
                logger.exception(
                    "dashboard_submit_failed mode=%s transaction_id=%s",
                    "update" if editing_id else "insert",
                    editing_id,
                )
                raise MutationFailure(str(exc)) from exc

            with self._state_lock:
                self._form.complete_submission()
            logger.info(
                "dashboard_submit_succeeded mode=%s transaction_id=%s",
                "update" if editing_id else "insert",
                saved.id if saved is not None else editing_id,
            )
            self.refresh()
            return saved

    def delete(self, transaction_id: str) -> None:
        """Delete a transaction, reset an edit session on it, then re-fetch."""

        with self._action_lock:
            try:
                self._repository.delete_transaction(transaction_id)
            except TransactionNotFoundError:
                logger.warning("dashboard_delete_target_missing transaction_id=%s", transaction_id)
                with self._state_lock:
                    self._form.invalidate(transaction_id)
                self.refresh()
                raise
            except Exception as exc:
                logger.exception("dashboard_delete_failed transaction_id=%s", transaction_id)
                raise MutationFailure(str(exc)) from exc

            with self._state_lock:
                self._form.invalidate(transaction_id)
            logger.info("dashboard_delete_succeeded transaction_id=%s", transaction_id)
            self.refresh()

    def view(self) -> DashboardView:
        with self._state_lock:
            return build_dashboard_view(
                derived=self.derived(),
                filters=self._filters,
                form=self._form.snapshot(),
                loading=self._loading,
                total_count=len(self._mirror),
                years=self._years,
                error=self._last_error,
                tz=self._tz,
                currency_symbol=self._currency_symbol,
            )
