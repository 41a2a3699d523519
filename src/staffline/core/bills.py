from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffline.config import Settings, get_settings
from staffline.core.billing import BillingResult, calculate_bill, markup_from_config, to_money
from staffline.core.errors import ConflictError, NotFoundError, ValidationError
from staffline.db.models import Bill, Company, ServiceProvider
from staffline.db.repositories import Repository
from staffline.types import BillCreate, BillUpdate

logger = logging.getLogger(__name__)


def bill_totals(client: Company, hours_worked: Decimal, service_rate: Decimal) -> BillingResult:
    """Apply ``client``'s markup and commission to one engagement."""
    return calculate_bill(
        hours_worked,
        service_rate,
        markup=markup_from_config(client.markup_type, client.markup_value),
        commission=client.commission,
    )


def _apply_totals(bill: Bill, result: BillingResult) -> None:
    rounded = result.rounded()
    bill.total_client = rounded.client_total
    bill.total_provider = rounded.provider_total
    bill.profit_margin = rounded.profit_margin


def month_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or datetime.now(UTC)
    start = datetime(now.year, now.month, 1, tzinfo=UTC)
    if now.month == 12:
        next_month = datetime(now.year + 1, 1, 1, tzinfo=UTC)
    else:
        next_month = datetime(now.year, now.month + 1, 1, tzinfo=UTC)
    return start, next_month - timedelta(microseconds=1)


@dataclass(slots=True)
class FinancialReport:
    start: datetime
    end: datetime
    total_bills: int = 0
    paid_bills: int = 0
    pending_bills: int = 0
    overdue_bills: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_provider_payments: Decimal = Decimal("0.00")
    profit: Decimal = Decimal("0.00")
    profit_margin: Decimal = Decimal("0.00")
    average_bill_value: Decimal = Decimal("0.00")
    top_clients: list[tuple[Company, Decimal, int]] = field(default_factory=list)
    top_providers: list[tuple[ServiceProvider, Decimal, int]] = field(default_factory=list)
    recent_bills: list[Bill] = field(default_factory=list)


class BillingService:
    def __init__(self, session: Session, *, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)

    def get_bill(self, bill_id: int) -> Bill:
        bill = self.repo.get_bill(bill_id)
        if bill is None:
            raise NotFoundError(f"Bill {bill_id} not found")
        return bill

    def _client(self, client_id: int) -> Company:
        client = self.repo.get_company(client_id, "client")
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def create_bill(self, payload: BillCreate) -> Bill:
        client = self._client(payload.client_id)
        provider = self.repo.get_provider(payload.provider_id)
        if provider is None:
            raise NotFoundError(f"Service provider {payload.provider_id} not found")

        bill = Bill(
            bill_number=self.repo.next_bill_number(self.settings.bill_number_prefix),
            client_id=client.id,
            provider_id=provider.id,
            service=payload.service,
            hours_worked=payload.hours_worked,
            service_rate=payload.service_rate,
            status="Pending",
            due_date=payload.due_date,
        )
        _apply_totals(bill, bill_totals(client, payload.hours_worked, payload.service_rate))
        try:
            self.repo.save(bill)
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Bill number already taken, retry the request") from exc

        logger.info(
            "bill %s created: client=%s provider=%s client_total=%s provider_total=%s",
            bill.bill_number,
            client.id,
            provider.id,
            bill.total_client,
            bill.total_provider,
        )
        return bill

    def update_bill(self, bill_id: int, payload: BillUpdate) -> Bill:
        bill = self.get_bill(bill_id)

        if payload.hours_worked is not None or payload.service_rate is not None:
            bill.hours_worked = payload.hours_worked if payload.hours_worked is not None else bill.hours_worked
            bill.service_rate = payload.service_rate if payload.service_rate is not None else bill.service_rate
            _apply_totals(bill, bill_totals(self._client(bill.client_id), bill.hours_worked, bill.service_rate))

        if payload.service is not None:
            bill.service = payload.service
        if payload.status is not None:
            bill.status = payload.status
        if payload.due_date is not None:
            bill.due_date = payload.due_date
        if payload.paid_date is not None:
            bill.paid_date = payload.paid_date

        self.repo.save(bill)
        logger.info("bill %s updated", bill.bill_number)
        return bill

    def delete_bill(self, bill_id: int) -> None:
        bill = self.get_bill(bill_id)
        if bill.status == "Paid":
            raise ValidationError("Cannot delete paid bills")
        self.repo.delete(bill)
        logger.info("bill %s deleted", bill.bill_number)

    def report(self, *, start: datetime | None = None, end: datetime | None = None) -> FinancialReport:
        if start is None and end is None:
            start, end = month_bounds()
        start = start or datetime(1970, 1, 1, tzinfo=UTC)
        end = end or datetime.now(UTC)

        report = FinancialReport(start=start, end=end)
        report.total_bills = self.repo.count_bills(start=start, end=end)
        report.paid_bills = self.repo.count_bills(start=start, end=end, status="Paid")
        report.pending_bills = self.repo.count_bills(start=start, end=end, status="Pending")
        report.overdue_bills = self.repo.count_bills(start=start, end=end, status="Overdue")

        revenue, provider_payments = self.repo.sum_paid_totals(start=start, end=end)
        profit = revenue - provider_payments
        report.total_revenue = to_money(revenue)
        report.total_provider_payments = to_money(provider_payments)
        report.profit = to_money(profit)
        if revenue > 0:
            report.profit_margin = to_money(profit / revenue * 100)
        if report.total_bills:
            report.average_bill_value = to_money(revenue / report.total_bills)

        report.top_clients = self.repo.top_clients(start=start, end=end)
        report.top_providers = self.repo.top_providers(start=start, end=end)
        report.recent_bills = self.repo.recent_bills(start=start, end=end)
        return report
