from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ApplicationStatus = Literal["pending", "approved", "rejected"]
ReviewStatus = Literal["approved", "rejected"]
Gender = Literal["Male", "Female", "Other"]
EntityType = Literal["Corporation", "LLC", "Partnership"]
CompanyType = Literal["client", "supplier", "customer"]
MarkupType = Literal["Percent", "Dollar"]
BillStatus = Literal["Pending", "Paid", "Overdue"]
UserRole = Literal["admin", "manager"]

Money = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]
Hours = Annotated[Decimal, Field(gt=0, max_digits=8, decimal_places=2)]
Percentage = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]
NonEmptyStr = Annotated[str, Field(min_length=1, max_length=255)]


def _clean_services(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    cleaned: list[str] = []
    for value in values:
        item = value.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


def _check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("must be a valid email address")
    return value


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class LoginRequest(StrictModel):
    username: NonEmptyStr
    password: NonEmptyStr


class UserCreate(StrictModel):
    username: Annotated[str, Field(min_length=3, max_length=80)]
    email: NonEmptyStr
    password: Annotated[str, Field(min_length=8, max_length=128)]
    role: UserRole = "manager"

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class ApplicationCreate(StrictModel):
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    email: NonEmptyStr
    phone: NonEmptyStr
    date_of_birth: date
    ssn: NonEmptyStr
    gender: Gender
    english_level: int = Field(ge=0, le=100)
    has_drivers_license: bool = False
    license_file_url: str | None = None
    license_file_original_name: str | None = None
    services: list[str] = Field(min_length=1)
    hourly_rate: Money | None = None
    work_experience: list[str] = Field(default_factory=list)
    additional_experience: str = ""
    previous_company_name: str = ""
    previous_company_phone: str = ""
    previous_company_email: str = ""
    address1: NonEmptyStr
    suite: str = ""
    city: NonEmptyStr
    state: NonEmptyStr
    zip_code: NonEmptyStr
    emergency_contact_name: NonEmptyStr
    emergency_contact_phone: NonEmptyStr
    emergency_contact_relation: NonEmptyStr
    how_did_you_hear: NonEmptyStr

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: list[str]) -> list[str]:
        cleaned = _clean_services(value) or []
        if not cleaned:
            raise ValueError("at least one service is required")
        return cleaned


class ApplicationReview(StrictModel):
    status: ReviewStatus
    services: list[str] | None = None
    hourly_rate: Money | None = None
    assigned_to: str | None = None

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: list[str] | None) -> list[str] | None:
        return _clean_services(value)


class ProviderCreate(StrictModel):
    application_id: int
    services: list[str] = Field(min_length=1)
    hourly_rate: Money
    assigned_to: NonEmptyStr

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: list[str]) -> list[str]:
        cleaned = _clean_services(value) or []
        if not cleaned:
            raise ValueError("at least one service is required")
        return cleaned


class ProviderUpdate(StrictModel):
    services: list[str] | None = None
    hourly_rate: Money | None = None
    assigned_to: str | None = None
    active: bool | None = None

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: list[str] | None) -> list[str] | None:
        cleaned = _clean_services(value)
        if cleaned is not None and not cleaned:
            raise ValueError("services cannot be empty")
        return cleaned


class CompanyCreate(StrictModel):
    company_name: NonEmptyStr
    entity: EntityType
    street: NonEmptyStr
    suite: str = ""
    city: NonEmptyStr
    state: NonEmptyStr
    zip_code: NonEmptyStr
    country: str = "USA"
    wc_class: str = ""
    markup_type: MarkupType | None = None
    markup_value: Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)] | None = None
    commission: Percentage | None = None
    assigned_to: str = ""
    internal_notes: str = ""
    active: bool = True

    @model_validator(mode="after")
    def validate_markup(self) -> CompanyCreate:
        if self.markup_type is not None and self.markup_value is None:
            raise ValueError("markup_value is required when markup_type is set")
        return self


class CompanyUpdate(StrictModel):
    company_name: NonEmptyStr | None = None
    entity: EntityType | None = None
    street: NonEmptyStr | None = None
    suite: str | None = None
    city: NonEmptyStr | None = None
    state: NonEmptyStr | None = None
    zip_code: NonEmptyStr | None = None
    country: str | None = None
    wc_class: str | None = None
    markup_type: MarkupType | None = None
    markup_value: Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)] | None = None
    commission: Percentage | None = None
    assigned_to: str | None = None
    internal_notes: str | None = None
    active: bool | None = None


class CatalogItemCreate(StrictModel):
    name: NonEmptyStr
    description: str = ""
    average_hourly_rate: Money
    active: bool = True


class CatalogItemUpdate(StrictModel):
    name: NonEmptyStr | None = None
    description: str | None = None
    average_hourly_rate: Money | None = None
    active: bool | None = None


class BillCreate(StrictModel):
    client_id: int
    provider_id: int
    service: NonEmptyStr
    hours_worked: Hours
    service_rate: Money
    due_date: date | None = None


class BillUpdate(StrictModel):
    service: NonEmptyStr | None = None
    hours_worked: Hours | None = None
    service_rate: Money | None = None
    status: BillStatus | None = None
    due_date: date | None = None
    paid_date: date | None = None
