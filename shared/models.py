"""Pydantic contracts shared across backend and HTTP layers."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(str, Enum):
    """Stable error codes surfaced to dashboard clients."""

    FETCH_FAILURE = "FETCH_FAILURE"
    MUTATION_FAILURE = "MUTATION_FAILURE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class ErrorPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ErrorCode
    message: str
    details: dict[str, object] | None = None


class TransactionType(str, Enum):
    """Direction of a transaction; decides the sign applied when aggregating."""

    INCOME = "income"
    EXPENSE = "expense"


CATEGORIES: tuple[str, ...] = ("Food", "Rent", "Transport", "Salary", "Other")
DEFAULT_CATEGORY = "Food"
DEFAULT_TYPE = TransactionType.EXPENSE

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

TRANSACTION_COLUMNS = "id,description,amount,category,type,created_at"


def _coerce_decimal(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            return value
    return value


class Transaction(BaseModel):
    """A transaction row as mirrored from the store.

    Rows coming back from PostgREST are untyped JSON; this model is the
    boundary schema that coerces them: ids become strings, amounts become
    non-negative decimals and timestamps become timezone-aware datetimes.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    description: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    category: str
    type: TransactionType
    created_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: object) -> object:
        value = _coerce_decimal(value)
        if isinstance(value, Decimal) and value.is_finite():
            return abs(value)
        return value

    @field_validator("created_at")
    @classmethod
    def assume_utc_when_naive(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TransactionFields(BaseModel):
    """Full set of user-editable fields sent on insert and update."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    description: str = Field(min_length=1)
    amount: Decimal = Field(ge=0)
    category: str = Field(min_length=1)
    type: TransactionType

    def to_row(self) -> dict[str, object]:
        """Return the JSON body expected by the transactions table."""

        return {
            "description": self.description,
            "amount": float(self.amount),
            "category": self.category,
            "type": self.type.value,
        }


class TransactionDraft(BaseModel):
    """Form values as typed by the user; amount stays raw text until submit."""

    model_config = ConfigDict(extra="forbid")

    description: str = ""
    amount: str = ""
    category: str = DEFAULT_CATEGORY
    type: str = DEFAULT_TYPE.value

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def type_as_text(cls, value: object) -> object:
        if isinstance(value, TransactionType):
            return value.value
        return value


class DashboardFilters(BaseModel):
    """Month (0-11), year and search criteria; None means "all"."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int | None = Field(default=None, ge=0, le=11)
    year: int | None = None
    search: str = ""

    @field_validator("month", "year", mode="before")
    @classmethod
    def parse_all_keyword(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or stripped.lower() == "all":
                return None
            return stripped
        return value

    @field_validator("search", mode="before")
    @classmethod
    def search_none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @classmethod
    def for_period_of(cls, moment: datetime) -> "DashboardFilters":
        """Return filters selecting the calendar month containing `moment`."""

        return cls(month=moment.month - 1, year=moment.year, search="")


class FormMode(str, Enum):
    CREATING = "creating"
    EDITING = "editing"


class FormState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: FormMode
    editing_id: str | None = None
    draft: TransactionDraft


class Totals(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")


class CategoryBreakdownRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    category: str
    total: Decimal
    percentage: float
    color: str


class TransactionView(BaseModel):
    """Transaction plus the display fields rendered in the history list."""

    model_config = ConfigDict(extra="forbid")

    id: str
    description: str
    amount: Decimal
    category: str
    type: TransactionType
    created_at: datetime
    display_amount: str
    display_date: str
    icon: str
    is_editing: bool = False


class TotalsView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    income: Decimal
    expenses: Decimal
    balance: Decimal
    display_income: str
    display_expenses: str
    display_balance: str
    balance_negative: bool


class CategoryBreakdownView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str
    total: Decimal
    percentage: float
    color: str
    display_total: str
    display_percentage: str


class FilterOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    months: list[str]
    years: list[int]
    categories: list[str]
    types: list[str]


class DashboardView(BaseModel):
    """Everything the single-page dashboard renders for the current state."""

    model_config = ConfigDict(extra="forbid")

    filters: DashboardFilters
    options: FilterOptions
    loading: bool
    form: FormState
    transactions: list[TransactionView]
    totals: TotalsView
    breakdown: list[CategoryBreakdownView]
    shown_count: int
    total_count: int
    error: ErrorPayload | None = None
