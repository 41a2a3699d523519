from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from staffline.db.base import Base, TimestampMixin, utcnow


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="manager", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Application(TimestampMixin, Base):
    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    ssn: Mapped[str] = mapped_column(String(20), nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)

    english_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    has_drivers_license: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    license_file_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    license_file_original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    services_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    work_experience_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    additional_experience: Mapped[str] = mapped_column(Text, default="", nullable=False)
    previous_company_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    previous_company_phone: Mapped[str] = mapped_column(String(40), default="", nullable=False)
    previous_company_email: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    address1: Mapped[str] = mapped_column(String(255), nullable=False)
    suite: Mapped[str] = mapped_column(String(60), default="", nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(60), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)

    emergency_contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    emergency_contact_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    emergency_contact_relation: Mapped[str] = mapped_column(String(80), nullable=False)
    how_did_you_hear: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ServiceProvider(TimestampMixin, Base):
    __tablename__ = "service_providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    application_id: Mapped[int | None] = mapped_column(
        ForeignKey("applications.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    services_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    assigned_to: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True, nullable=False)


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity: Mapped[str] = mapped_column(String(20), nullable=False)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    suite: Mapped[str] = mapped_column(String(60), default="", nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(60), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(60), default="USA", nullable=False)
    wc_class: Mapped[str] = mapped_column(String(40), default="", nullable=False)
    markup_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    markup_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    commission: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    assigned_to: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    internal_notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Bill(TimestampMixin, Base):
    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bill_number: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    client_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), index=True, nullable=False)
    provider_id: Mapped[int] = mapped_column(ForeignKey("service_providers.id"), index=True, nullable=False)
    service: Mapped[str] = mapped_column(String(255), nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    service_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_client: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_provider: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    profit_margin: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="Pending", index=True, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class CatalogMixin(TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    average_hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Job(CatalogMixin, Base):
    __tablename__ = "jobs"


class Service(CatalogMixin, Base):
    __tablename__ = "services"


class Counter(Base):
    """Named monotonic sequences; values never go backwards when rows are deleted."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(40), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
