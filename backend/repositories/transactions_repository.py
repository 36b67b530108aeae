"""Transactions repository adapters over the `transactions` table."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Protocol
from uuid import uuid4

from pydantic import ValidationError

from backend.db.supabase_client import SupabaseClient
from shared.errors import TransactionNotFoundError
from shared.models import TRANSACTION_COLUMNS, Transaction, TransactionFields


logger = logging.getLogger(__name__)


class WriteResultUnreadableError(RuntimeError):
    """Raised when a write was applied but the returned row cannot be read back."""


class TransactionsRepository(Protocol):
    def list_transactions(self) -> list[Transaction]:
        """Return every transaction, newest `created_at` first."""

    def insert_transaction(self, fields: TransactionFields) -> Transaction:
        """Create a transaction; the store assigns `id` and `created_at`."""

    def update_transaction(self, transaction_id: str, fields: TransactionFields) -> Transaction:
        """Overwrite all editable fields of one transaction."""

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete one transaction by id."""


def _parse_rows(rows: list[dict[str, Any]], *, table: str) -> list[Transaction]:
    transactions: list[Transaction] = []
    for row in rows:
        try:
            transactions.append(Transaction.model_validate(row))
        except ValidationError as exc:
            logger.warning(
                "transaction_row_skipped table=%s id=%s errors=%s",
                table,
                row.get("id") if isinstance(row, dict) else None,
                exc.error_count(),
            )
    return transactions


def _parse_written_row(row: dict[str, Any], *, table: str) -> Transaction:
    try:
        return Transaction.model_validate(row)
    except ValidationError as exc:
        raise WriteResultUnreadableError(
            f"Supabase returned an unreadable row for table {table}: {exc.error_count()} errors"
        ) from exc


class InMemoryTransactionsRepository:
    """In-memory store used by tests/dev when Supabase is not configured."""

    def __init__(
        self,
        seed: list[Transaction] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._rows: list[Transaction] = list(seed or [])
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def list_transactions(self) -> list[Transaction]:
        return sorted(self._rows, key=lambda row: row.created_at, reverse=True)

    def insert_transaction(self, fields: TransactionFields) -> Transaction:
        transaction = Transaction(
            id=str(uuid4()),
            created_at=self._clock(),
            **fields.model_dump(),
        )
        self._rows.append(transaction)
        return transaction

    def update_transaction(self, transaction_id: str, fields: TransactionFields) -> Transaction:
        for index, row in enumerate(self._rows):
            if row.id != transaction_id:
                continue
            updated = row.model_copy(update=fields.model_dump())
            self._rows[index] = updated
            return updated

        raise TransactionNotFoundError("Transaction not found", details={"id": transaction_id})

    def delete_transaction(self, transaction_id: str) -> None:
        kept_rows = [row for row in self._rows if row.id != transaction_id]
        if len(kept_rows) == len(self._rows):
            raise TransactionNotFoundError("Transaction not found", details={"id": transaction_id})
        self._rows = kept_rows


class SupabaseTransactionsRepository:
    """Supabase repository reading and writing the transactions table via PostgREST."""

    def __init__(self, client: SupabaseClient, *, table: str = "transactions") -> None:
        self._client = client
        self._table = table

    def list_transactions(self) -> list[Transaction]:
        rows = self._client.get_rows(
            table=self._table,
            query=[
                ("select", TRANSACTION_COLUMNS),
                ("order", "created_at.desc"),
            ],
        )
        return _parse_rows(rows, table=self._table)

    def insert_transaction(self, fields: TransactionFields) -> Transaction:
        rows = self._client.post_rows(
            table=self._table,
            query={"select": TRANSACTION_COLUMNS},
            payload=fields.to_row(),
        )
        if not rows:
            raise WriteResultUnreadableError("Supabase did not return created transaction")
        return _parse_written_row(rows[0], table=self._table)

    def update_transaction(self, transaction_id: str, fields: TransactionFields) -> Transaction:
        rows = self._client.patch_rows(
            table=self._table,
            query={"id": f"eq.{transaction_id}", "select": TRANSACTION_COLUMNS},
            payload=fields.to_row(),
        )
        if not rows:
            raise TransactionNotFoundError("Transaction not found", details={"id": transaction_id})
        return _parse_written_row(rows[0], table=self._table)

    def delete_transaction(self, transaction_id: str) -> None:
        rows = self._client.delete_rows(
            table=self._table,
            query={"id": f"eq.{transaction_id}", "select": "id"},
        )
        if not rows:
            raise TransactionNotFoundError("Transaction not found", details={"id": transaction_id})
