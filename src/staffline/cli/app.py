from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation
from functools import wraps
from pathlib import Path
from typing import Any, get_args

import typer
import uvicorn
from pydantic import ValidationError as PydanticValidationError

from staffline.api.app import create_app
from staffline.config import get_settings
from staffline.core.approval import ApprovalService
from staffline.core.billing import Markup, calculate_bill
from staffline.core.bills import BillingService
from staffline.core.errors import NotFoundError, StafflineError
from staffline.core.invoices import write_bill_pdf
from staffline.db.init import init_database
from staffline.db.repositories import Repository
from staffline.db.session import SessionLocal
from staffline.logging_config import configure_logging
from staffline.types import ApplicationReview, BillCreate, MarkupType, ReviewStatus

app = typer.Typer(help="Staffline back-office CLI")
applications_app = typer.Typer(help="Review labour applications")
bills_app = typer.Typer(help="Create and print bills")

app.add_typer(applications_app, name="applications")
app.add_typer(bills_app, name="bills")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _decimal(value: str, option: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise typer.BadParameter(f"{option} must be a number") from exc


def _date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{option} must be a date in YYYY-MM-DD format") from exc


def reports_errors(func: Callable[..., None]) -> Callable[..., None]:
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            func(*args, **kwargs)
        except StafflineError as exc:
            _echo({"ok": False, "error": exc.code, "message": exc.message})
            raise typer.Exit(code=1) from exc
        except PydanticValidationError as exc:
            _echo({"ok": False, "error": "validation_error", "message": str(exc)})
            raise typer.Exit(code=1) from exc

    return wrapper


@app.command("init")
def init_cmd() -> None:
    """Initialize database, directories, and seed records."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("calc")
def calc(
    hours: str = typer.Option(..., "--hours"),
    rate: str = typer.Option(..., "--rate"),
    markup_type: str | None = typer.Option(None, "--markup-type", help="Percent or Dollar"),
    markup_value: str | None = typer.Option(None, "--markup-value"),
    commission: str | None = typer.Option(None, "--commission"),
) -> None:
    """Show client and provider totals for one engagement."""
    hours_worked = _decimal(hours, "--hours")
    service_rate = _decimal(rate, "--rate")
    if hours_worked <= 0 or service_rate <= 0:
        raise typer.BadParameter("hours and rate must be positive")
    markup = None
    if markup_type is not None:
        if markup_type not in get_args(MarkupType) or markup_value is None:
            raise typer.BadParameter("--markup-type must be Percent or Dollar and needs --markup-value")
        markup = Markup(kind=markup_type, value=_decimal(markup_value, "--markup-value"))  # type: ignore[arg-type]

    percent = _decimal(commission, "--commission") if commission is not None else None
    result = calculate_bill(hours_worked, service_rate, markup=markup, commission=percent).rounded()
    _echo(
        {
            "base_total": result.base_total,
            "client_total": result.client_total,
            "provider_total": result.provider_total,
            "profit": result.profit,
            "profit_margin": result.profit_margin,
        }
    )


@applications_app.command("list")
def applications_list(
    status: str | None = typer.Option(None, "--status"),
    search: str | None = typer.Option(None, "--search"),
    limit: int = typer.Option(20, "--limit"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        page = Repository(db).list_applications(status=status, search=search, limit=limit)
        _echo(
            {
                "total": page.total,
                "items": [
                    {
                        "id": row.id,
                        "name": row.full_name,
                        "email": row.email,
                        "services": row.services_json,
                        "status": row.status,
                        "submitted_at": row.submitted_at.isoformat(),
                    }
                    for row in page.items
                ],
            }
        )


@applications_app.command("review")
@reports_errors
def applications_review(
    application_id: int = typer.Option(..., "--application-id"),
    status: str = typer.Option(..., "--status", help="approved or rejected"),
    reviewer: str = typer.Option(..., "--reviewer", help="Username of the reviewing user"),
    services: list[str] | None = typer.Option(None, "--service"),
    hourly_rate: str | None = typer.Option(None, "--hourly-rate"),
    assigned_to: str | None = typer.Option(None, "--assigned-to"),
) -> None:
    if status not in get_args(ReviewStatus):
        raise typer.BadParameter("--status must be approved or rejected")

    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        user = Repository(db).get_user_by_username(reviewer)
        if user is None:
            raise NotFoundError(f"User {reviewer} not found")
        review = ApplicationReview(
            status=status,
            services=services or None,
            hourly_rate=hourly_rate,
            assigned_to=assigned_to,
        )
        outcome = ApprovalService(db).review(application_id, review, reviewer_id=user.id)
        provider = outcome.provider
        _echo(
            {
                "ok": True,
                "message": outcome.message,
                "application": {"id": outcome.application.id, "status": outcome.application.status},
                "provider": None
                if provider is None
                else {
                    "id": provider.id,
                    "services": provider.services_json,
                    "hourly_rate": provider.hourly_rate,
                    "active": provider.active,
                },
            }
        )


@bills_app.command("create")
@reports_errors
def bills_create(
    client_id: int = typer.Option(..., "--client-id"),
    provider_id: int = typer.Option(..., "--provider-id"),
    service: str = typer.Option(..., "--service"),
    hours: str = typer.Option(..., "--hours"),
    rate: str = typer.Option(..., "--rate"),
    due_date: str | None = typer.Option(None, "--due-date", help="YYYY-MM-DD"),
) -> None:
    configure_logging()
    ensure_initialized()
    payload = BillCreate(
        client_id=client_id,
        provider_id=provider_id,
        service=service,
        hours_worked=hours,
        service_rate=rate,
        due_date=_date(due_date, "--due-date"),
    )
    with SessionLocal() as db:
        bill = BillingService(db).create_bill(payload)
        _echo(
            {
                "id": bill.id,
                "bill_number": bill.bill_number,
                "total_client": bill.total_client,
                "total_provider": bill.total_provider,
                "profit_margin": bill.profit_margin,
            }
        )


@bills_app.command("pdf")
@reports_errors
def bills_pdf(bill_id: int = typer.Option(..., "--bill-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        path: Path = write_bill_pdf(db, bill_id)
        _echo({"ok": True, "path": str(path)})


@app.command("report")
def report(
    start_date: str | None = typer.Option(None, "--start-date", help="YYYY-MM-DD"),
    end_date: str | None = typer.Option(None, "--end-date", help="YYYY-MM-DD"),
) -> None:
    """Summarize billing for a period (defaults to the current month)."""
    configure_logging()
    ensure_initialized()
    start_day = _date(start_date, "--start-date")
    end_day = _date(end_date, "--end-date")
    start = datetime.combine(start_day, time.min, tzinfo=UTC) if start_day else None
    end = datetime.combine(end_day, time.max, tzinfo=UTC) if end_day else None
    with SessionLocal() as db:
        result = BillingService(db).report(start=start, end=end)
        _echo(
            {
                "start": result.start.isoformat(),
                "end": result.end.isoformat(),
                "total_bills": result.total_bills,
                "paid_bills": result.paid_bills,
                "pending_bills": result.pending_bills,
                "overdue_bills": result.overdue_bills,
                "total_revenue": result.total_revenue,
                "total_provider_payments": result.total_provider_payments,
                "profit": result.profit,
                "profit_margin": result.profit_margin,
            }
        )


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
