"""Form/edit controller holding the single transaction draft."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from shared.errors import DraftValidationError
from shared.models import (
    FormMode,
    FormState,
    Transaction,
    TransactionDraft,
    TransactionFields,
    TransactionType,
)


def parse_amount(raw_amount: str) -> Decimal:
    """Parse the amount text typed in the form into a non-negative decimal."""

    text = raw_amount.strip()
    if not text:
        raise DraftValidationError("Amount is required", details={"field": "amount"})
    try:
        amount = Decimal(text)
    except InvalidOperation as exc:
        raise DraftValidationError("Amount must be a number", details={"field": "amount"}) from exc
    if not amount.is_finite():
        raise DraftValidationError("Amount must be a number", details={"field": "amount"})
    if amount < 0:
        raise DraftValidationError("Amount must not be negative", details={"field": "amount"})
    if not math.isfinite(float(amount)):
        raise DraftValidationError("Amount is too large", details={"field": "amount"})
    return amount


class TransactionForm:
    """Two-state machine: creating a new transaction or editing an existing one.

    The draft is reset whenever the form leaves the editing state, so a stale
    edit never leaks into the next creation.
    """

    def __init__(self) -> None:
        self._editing_id: str | None = None
        self._draft = TransactionDraft()

    @property
    def mode(self) -> FormMode:
        return FormMode.EDITING if self._editing_id is not None else FormMode.CREATING

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    @property
    def draft(self) -> TransactionDraft:
        return self._draft.model_copy()

    def snapshot(self) -> FormState:
        return FormState(mode=self.mode, editing_id=self._editing_id, draft=self.draft)

    def start_edit(self, transaction: Transaction) -> None:
        self._editing_id = transaction.id
        self._draft = TransactionDraft(
            description=transaction.description,
            amount=transaction.amount,
            category=transaction.category,
            type=transaction.type,
        )

    def cancel(self) -> None:
        self._reset()

    def update_draft(self, **changes: object) -> TransactionDraft:
        """Apply field changes to the draft; unknown fields are rejected."""

        try:
            self._draft = TransactionDraft.model_validate({**self._draft.model_dump(), **changes})
        except ValidationError as exc:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
            raise DraftValidationError(
                f"Invalid draft fields: {', '.join(fields)}",
                details={"fields": fields},
            ) from exc
        return self.draft

    def build_payload(self) -> TransactionFields:
        """Validate the draft and return the fields to send to the store."""

        draft = self._draft
        if not draft.description.strip():
            raise DraftValidationError("Description is required", details={"field": "description"})
        if not draft.category.strip():
            raise DraftValidationError("Category is required", details={"field": "category"})
        try:
            transaction_type = TransactionType(draft.type)
        except ValueError as exc:
            raise DraftValidationError(
                "Type must be income or expense",
                details={"field": "type"},
            ) from exc

        return TransactionFields(
            description=draft.description,
            amount=parse_amount(draft.amount),
            category=draft.category,
            type=transaction_type,
        )

    def complete_submission(self) -> None:
        self._reset()

    def invalidate(self, transaction_id: str) -> bool:
        """Drop the edit session when its transaction no longer exists."""

        if self._editing_id is None or self._editing_id != transaction_id:
            return False
        self._reset()
        return True

    def _reset(self) -> None:
        self._editing_id = None
        self._draft = TransactionDraft()
