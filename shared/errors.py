"""Error taxonomy shared by the dashboard session and the HTTP layer."""

from __future__ import annotations

from shared.models import ErrorCode, ErrorPayload


class DashboardError(Exception):
    """Base error carrying a stable code and a user-facing message."""

    code: ErrorCode = ErrorCode.MUTATION_FAILURE

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(code=self.code, message=self.message, details=self.details)


class FetchFailure(DashboardError):
    """Listing transactions from the store failed; the mirror is left untouched."""

    code = ErrorCode.FETCH_FAILURE


class MutationFailure(DashboardError):
    """Insert, update or delete failed at the store."""

    code = ErrorCode.MUTATION_FAILURE


class DraftValidationError(DashboardError):
    """The draft cannot be turned into a store payload."""

    code = ErrorCode.VALIDATION_ERROR


class TransactionNotFoundError(DashboardError):
    code = ErrorCode.NOT_FOUND
