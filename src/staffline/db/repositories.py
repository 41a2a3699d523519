from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from sqlalchemy import String, case, cast, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from staffline.db.models import (
    Application,
    Bill,
    Company,
    Counter,
    Job,
    Service,
    ServiceProvider,
    User,
)

T = TypeVar("T")
CatalogModel = type[Job] | type[Service]
BILL_NUMBER_COUNTER = "bill_number"


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _like(term: str) -> str:
    return f"%{term.strip().lower()}%"


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def save(self, obj: T, *, commit: bool = True) -> T:
        self.session.add(obj)
        if commit:
            self.session.commit()
            self.session.refresh(obj)
        else:
            self.session.flush()
        return obj

    def delete(self, obj: Any) -> None:
        self.session.delete(obj)
        self.session.commit()

    def _paginate(self, statement: Select, page: int, limit: int) -> Page:
        total = self.session.scalar(select(func.count()).select_from(statement.order_by(None).subquery())) or 0
        rows = self.session.scalars(statement.offset((page - 1) * limit).limit(limit)).all()
        return Page(items=list(rows), total=total, page=page, limit=limit)

    # users

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return self.session.scalar(select(User).where(User.username == username))

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(func.lower(User.email) == email.lower()))

    def create_user(self, *, username: str, email: str, password_hash: str, role: str = "manager") -> User:
        return self.save(User(username=username, email=email, password_hash=password_hash, role=role))

    # applications

    def get_application(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def get_application_by_email(self, email: str) -> Application | None:
        return self.session.scalar(select(Application).where(func.lower(Application.email) == email.lower()))

    def list_applications(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Application]:
        statement = select(Application)
        if status:
            statement = statement.where(Application.status == status)
        if search:
            pattern = _like(search)
            statement = statement.where(
                or_(
                    func.lower(Application.first_name).like(pattern),
                    func.lower(Application.last_name).like(pattern),
                    func.lower(Application.email).like(pattern),
                    func.lower(Application.phone).like(pattern),
                )
            )
        pending_first = case((Application.status == "pending", 0), else_=1)
        statement = statement.order_by(pending_first, Application.submitted_at.desc(), Application.id.desc())
        return self._paginate(statement, page, limit)

    def application_stats(self) -> dict[str, int]:
        rows = self.session.execute(
            select(Application.status, func.count(Application.id)).group_by(Application.status)
        ).all()
        counts = {status: count for status, count in rows}
        stats = {key: counts.get(key, 0) for key in ("pending", "approved", "rejected")}
        stats["total"] = sum(counts.values())
        return stats

    def delete_application(self, application: Application) -> None:
        provider = self.get_provider_by_application(application.id)
        if provider is not None:
            provider.application_id = None
            self.session.flush()
        self.delete(application)

    # service providers

    def get_provider(self, provider_id: int) -> ServiceProvider | None:
        return self.session.get(ServiceProvider, provider_id)

    def get_provider_by_application(self, application_id: int) -> ServiceProvider | None:
        return self.session.scalar(select(ServiceProvider).where(ServiceProvider.application_id == application_id))

    def create_provider(
        self,
        *,
        application_id: int | None,
        services: list[str],
        hourly_rate: Decimal,
        assigned_to: str,
        commit: bool = True,
    ) -> ServiceProvider:
        provider = ServiceProvider(
            application_id=application_id,
            services_json=list(services),
            hourly_rate=hourly_rate,
            assigned_to=assigned_to,
            active=True,
        )
        return self.save(provider, commit=commit)

    def list_providers(
        self,
        *,
        active: bool | None = None,
        service: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[ServiceProvider]:
        statement = select(ServiceProvider)
        if active is not None:
            statement = statement.where(ServiceProvider.active.is_(active))
        if service:
            statement = statement.where(cast(ServiceProvider.services_json, String).like(f'%"{service}"%'))
        if search:
            pattern = _like(search)
            statement = statement.join(Application, Application.id == ServiceProvider.application_id).where(
                or_(
                    func.lower(Application.first_name).like(pattern),
                    func.lower(Application.last_name).like(pattern),
                    func.lower(Application.email).like(pattern),
                    func.lower(Application.phone).like(pattern),
                )
            )
        statement = statement.order_by(ServiceProvider.created_at.desc(), ServiceProvider.id.desc())
        return self._paginate(statement, page, limit)

    def provider_applications(self, providers: list[ServiceProvider]) -> dict[int, Application]:
        ids = {p.application_id for p in providers if p.application_id is not None}
        if not ids:
            return {}
        rows = self.session.scalars(select(Application).where(Application.id.in_(ids))).all()
        return {row.id: row for row in rows}

    def count_bills_for_provider(self, provider_id: int) -> int:
        return self.session.scalar(select(func.count(Bill.id)).where(Bill.provider_id == provider_id)) or 0

    # companies

    def get_company(self, company_id: int, company_type: str | None = None) -> Company | None:
        company = self.session.get(Company, company_id)
        if company is None or (company_type is not None and company.type != company_type):
            return None
        return company

    def list_companies(
        self,
        company_type: str,
        *,
        active: bool | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Company]:
        statement = select(Company).where(Company.type == company_type)
        if active is not None:
            statement = statement.where(Company.active.is_(active))
        if search:
            pattern = _like(search)
            statement = statement.where(
                or_(
                    func.lower(Company.company_name).like(pattern),
                    func.lower(Company.city).like(pattern),
                    func.lower(Company.state).like(pattern),
                    func.lower(Company.assigned_to).like(pattern),
                )
            )
        statement = statement.order_by(Company.created_at.desc(), Company.id.desc())
        return self._paginate(statement, page, limit)

    def count_bills_for_client(self, client_id: int) -> int:
        return self.session.scalar(select(func.count(Bill.id)).where(Bill.client_id == client_id)) or 0

    # catalog

    def get_catalog_item(self, model: CatalogModel, item_id: int) -> Job | Service | None:
        return self.session.get(model, item_id)

    def get_catalog_item_by_name(self, model: CatalogModel, name: str) -> Job | Service | None:
        return self.session.scalar(select(model).where(func.lower(model.name) == name.strip().lower()))

    def list_catalog(
        self,
        model: CatalogModel,
        *,
        active: bool | None = None,
        search: str | None = None,
    ) -> list[Job | Service]:
        statement = select(model)
        if active is not None:
            statement = statement.where(model.active.is_(active))
        if search:
            pattern = _like(search)
            statement = statement.where(
                or_(func.lower(model.name).like(pattern), func.lower(model.description).like(pattern))
            )
        return list(self.session.scalars(statement.order_by(model.name.asc())).all())

    # bills

    def get_bill(self, bill_id: int) -> Bill | None:
        return self.session.get(Bill, bill_id)

    def next_bill_number(self, prefix: str) -> str:
        counter = self.session.get(Counter, BILL_NUMBER_COUNTER)
        if counter is None:
            # databases created before the counter existed start after their highest bill
            counter = Counter(name=BILL_NUMBER_COUNTER, value=self.session.scalar(select(func.max(Bill.id))) or 0)
            self.session.add(counter)
        counter.value += 1
        self.session.flush()
        return f"{prefix}-{counter.value:04d}"

    def _bill_filters(
        self,
        *,
        status: str | None = None,
        client_id: int | None = None,
        provider_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Any]:
        conditions: list[Any] = []
        if status:
            conditions.append(Bill.status == status)
        if client_id is not None:
            conditions.append(Bill.client_id == client_id)
        if provider_id is not None:
            conditions.append(Bill.provider_id == provider_id)
        if start is not None:
            conditions.append(Bill.created_at >= start)
        if end is not None:
            conditions.append(Bill.created_at <= end)
        return conditions

    def list_bills(
        self,
        *,
        status: str | None = None,
        client_id: int | None = None,
        provider_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Bill]:
        statement = select(Bill).where(
            *self._bill_filters(status=status, client_id=client_id, provider_id=provider_id, start=start, end=end)
        )
        if search:
            pattern = _like(search)
            statement = (
                statement.join(Company, Company.id == Bill.client_id)
                .join(ServiceProvider, ServiceProvider.id == Bill.provider_id)
                .outerjoin(Application, Application.id == ServiceProvider.application_id)
                .where(
                    or_(
                        func.lower(Bill.bill_number).like(pattern),
                        func.lower(Bill.service).like(pattern),
                        func.lower(Company.company_name).like(pattern),
                        func.lower(Application.first_name).like(pattern),
                        func.lower(Application.last_name).like(pattern),
                    )
                )
            )
        statement = statement.order_by(Bill.created_at.desc(), Bill.id.desc())
        return self._paginate(statement, page, limit)

    def count_bills(self, *, start: datetime, end: datetime, status: str | None = None) -> int:
        conditions = self._bill_filters(status=status, start=start, end=end)
        return self.session.scalar(select(func.count(Bill.id)).where(*conditions)) or 0

    def sum_paid_totals(self, *, start: datetime, end: datetime) -> tuple[Decimal, Decimal]:
        conditions = self._bill_filters(status="Paid", start=start, end=end)
        row = self.session.execute(
            select(func.sum(Bill.total_client), func.sum(Bill.total_provider)).where(*conditions)
        ).one()
        return Decimal(row[0] or 0), Decimal(row[1] or 0)

    def top_clients(self, *, start: datetime, end: datetime, limit: int = 5) -> list[tuple[Company, Decimal, int]]:
        conditions = self._bill_filters(status="Paid", start=start, end=end)
        revenue = func.sum(Bill.total_client)
        rows = self.session.execute(
            select(Company, revenue, func.count(Bill.id))
            .join(Bill, Bill.client_id == Company.id)
            .where(*conditions)
            .group_by(Company.id)
            .order_by(revenue.desc())
            .limit(limit)
        ).all()
        return [(company, Decimal(total or 0), count) for company, total, count in rows]

    def top_providers(
        self, *, start: datetime, end: datetime, limit: int = 5
    ) -> list[tuple[ServiceProvider, Decimal, int]]:
        conditions = self._bill_filters(start=start, end=end)
        bill_count = func.count(Bill.id)
        rows = self.session.execute(
            select(ServiceProvider, func.sum(Bill.total_provider), bill_count)
            .join(Bill, Bill.provider_id == ServiceProvider.id)
            .where(*conditions)
            .group_by(ServiceProvider.id)
            .order_by(bill_count.desc())
            .limit(limit)
        ).all()
        return [(provider, Decimal(total or 0), count) for provider, total, count in rows]

    def recent_bills(self, *, start: datetime, end: datetime, limit: int = 10) -> list[Bill]:
        conditions = self._bill_filters(start=start, end=end)
        statement = select(Bill).where(*conditions).order_by(Bill.created_at.desc(), Bill.id.desc())
        return list(self.session.scalars(statement.limit(limit)).all())
