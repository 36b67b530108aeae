"""FastAPI entrypoint for the finance dashboard HTTP endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, NoReturn

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from backend.factory import build_dashboard_session
from backend.reporting import generate_dashboard_report_pdf
from backend.services.dashboard_service import DashboardSession
from shared import config as _config
from shared.errors import DashboardError
from shared.models import DashboardView, ErrorCode, TransactionView


logger = logging.getLogger(__name__)


_STATUS_BY_ERROR_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.MUTATION_FAILURE: 502,
    ErrorCode.FETCH_FAILURE: 502,
}


class FiltersPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    month: int | str | None = None
    year: int | str | None = None
    search: str | None = None


class DraftPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    amount: str | float | None = None
    category: str | None = None
    type: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TransactionsListResponse(BaseModel):
    items: list[TransactionView]
    shown_count: int = Field(ge=0)
    total_count: int = Field(ge=0)


@lru_cache(maxsize=1)
def get_dashboard_session() -> DashboardSession:
    """Create and cache the dashboard session once per process."""

    session = build_dashboard_session()
    logger.info("dashboard_session_ready mirror_size=%s", len(session.transactions))
    return session


def _raise_http_error(exc: DashboardError) -> NoReturn:
    status_code = _STATUS_BY_ERROR_CODE.get(exc.code, 400)
    raise HTTPException(status_code=status_code, detail=exc.message) from exc


def _apply_filters(session: DashboardSession, changes: dict[str, Any]) -> None:
    if not changes:
        return
    try:
        session.update_filters(**changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail="Invalid filters") from exc


app = FastAPI(title="Finance Pro Dashboard API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/dashboard", response_model=DashboardView)
def get_dashboard(month: str | None = None, year: str | None = None, search: str | None = None) -> Any:
    """Return the dashboard view; query parameters also update the session filters."""

    session = get_dashboard_session()
    changes = {
        key: value
        for key, value in {"month": month, "year": year, "search": search}.items()
        if value is not None
    }
    _apply_filters(session, changes)
    return session.view()


@app.put("/dashboard/filters", response_model=DashboardView)
def put_filters(payload: FiltersPayload) -> Any:
    session = get_dashboard_session()
    _apply_filters(session, payload.model_dump(exclude_unset=True))
    return session.view()


@app.post("/dashboard/refresh", response_model=DashboardView)
def refresh_dashboard() -> Any:
    session = get_dashboard_session()
    if not session.refresh():
        logger.warning("dashboard_refresh_endpoint_kept_previous_mirror")
    return session.view()


@app.get("/transactions", response_model=TransactionsListResponse)
def list_transactions() -> Any:
    """Return the filtered transaction history."""

    view = get_dashboard_session().view()
    return TransactionsListResponse(
        items=view.transactions,
        shown_count=view.shown_count,
        total_count=view.total_count,
    )


@app.post("/dashboard/form/edit/{transaction_id}", response_model=DashboardView)
def start_edit(transaction_id: str) -> Any:
    session = get_dashboard_session()
    try:
        session.start_edit(transaction_id)
    except DashboardError as exc:
        _raise_http_error(exc)
    return session.view()


@app.post("/dashboard/form/cancel", response_model=DashboardView)
def cancel_edit() -> Any:
    session = get_dashboard_session()
    session.cancel_edit()
    return session.view()


@app.patch("/dashboard/form/draft", response_model=DashboardView)
def patch_draft(payload: DraftPayload) -> Any:
    session = get_dashboard_session()
    try:
        session.update_draft(**payload.changes())
    except DashboardError as exc:
        _raise_http_error(exc)
    return session.view()


@app.post("/dashboard/form/submit", response_model=DashboardView)
def submit_form(payload: DraftPayload | None = None) -> Any:
    """Insert or update from the draft, then return the refreshed view."""

    session = get_dashboard_session()
    try:
        if payload is not None:
            session.update_draft(**payload.changes())
        saved = session.submit()
    except DashboardError as exc:
        logger.info("dashboard_submit_rejected code=%s", exc.code.value)
        _raise_http_error(exc)
    logger.info(
        "dashboard_submit_endpoint_completed transaction_id=%s",
        saved.id if saved is not None else None,
    )
    return session.view()


@app.delete("/transactions/{transaction_id}", response_model=DashboardView)
def delete_transaction(transaction_id: str) -> Any:
    session = get_dashboard_session()
    try:
        session.delete(transaction_id)
    except DashboardError as exc:
        _raise_http_error(exc)
    return session.view()


@app.get("/dashboard/report.pdf")
def get_dashboard_report_pdf() -> Response:
    """Render the currently filtered dashboard as a PDF document."""

    view = get_dashboard_session().view()
    logger.info(
        "dashboard_report_requested",
        extra={
            "month": view.filters.month,
            "year": view.filters.year,
            "shown_count": view.shown_count,
        },
    )
    pdf_bytes = generate_dashboard_report_pdf(view)
    month_part = f"{view.filters.month + 1:02d}" if view.filters.month is not None else "all"
    year_part = str(view.filters.year) if view.filters.year is not None else "all"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="finance-report-{year_part}-{month_part}.pdf"'},
    )
