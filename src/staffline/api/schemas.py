from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    success: bool = True
    message: str = ""
    data: DataT | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PageEnvelope(BaseModel, Generic[DataT]):
    success: bool = True
    message: str = ""
    data: list[DataT] = Field(default_factory=list)
    pagination: Pagination


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: date
    ssn: str
    gender: str
    english_level: int
    has_drivers_license: bool
    license_file_url: str | None
    license_file_original_name: str | None
    services: list[str] = Field(validation_alias=AliasChoices("services", "services_json"))
    hourly_rate: Decimal | None
    work_experience: list[str] = Field(validation_alias=AliasChoices("work_experience", "work_experience_json"))
    additional_experience: str
    previous_company_name: str
    previous_company_phone: str
    previous_company_email: str
    address1: str
    suite: str
    city: str
    state: str
    zip_code: str
    emergency_contact_name: str
    emergency_contact_phone: str
    emergency_contact_relation: str
    how_did_you_hear: str
    status: str
    submitted_at: datetime
    reviewed_at: datetime | None
    reviewed_by: int | None

    @field_validator("ssn")
    @classmethod
    def mask_ssn(cls, value: str) -> str:
        digits = "".join(ch for ch in value if ch.isdigit())
        return f"***-**-{digits[-4:]}" if len(digits) >= 4 else "***"


class ApplicationStats(BaseModel):
    pending: int
    approved: int
    rejected: int
    total: int


class ProviderResponse(BaseModel):
    id: int
    application_id: int | None
    name: str
    email: str
    phone: str
    services: list[str]
    hourly_rate: Decimal
    assigned_to: str
    active: bool
    english_level: int | None = None
    has_license: bool | None = None
    created_at: datetime
    updated_at: datetime


class ReviewResponse(BaseModel):
    application: ApplicationResponse
    provider: ProviderResponse | None


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    company_name: str
    entity: str
    street: str
    suite: str
    city: str
    state: str
    zip_code: str
    country: str
    wc_class: str
    markup_type: str | None
    markup_value: Decimal | None
    commission: Decimal | None
    assigned_to: str
    internal_notes: str
    active: bool
    created_at: datetime
    updated_at: datetime


class CatalogItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    average_hourly_rate: Decimal
    active: bool


class BillResponse(BaseModel):
    id: int
    bill_number: str
    client_id: int
    client_name: str
    provider_id: int
    provider_name: str
    service: str
    hours_worked: Decimal
    service_rate: Decimal
    total_client: Decimal
    total_provider: Decimal
    profit: Decimal
    profit_margin: Decimal
    status: str
    due_date: date | None
    paid_date: date | None
    created_at: datetime
    updated_at: datetime


class UploadResponse(BaseModel):
    filename: str
    original_name: str
    size: int
    url: str


class ReportSummary(BaseModel):
    total_bills: int
    paid_bills: int
    pending_bills: int
    overdue_bills: int
    total_revenue: Decimal
    total_provider_payments: Decimal
    profit: Decimal
    profit_margin: Decimal
    average_bill_value: Decimal


class TopClient(BaseModel):
    client_id: int
    company_name: str
    total_revenue: Decimal
    bill_count: int


class TopProvider(BaseModel):
    provider_id: int
    name: str
    total_earnings: Decimal
    bill_count: int


class RecentBill(BaseModel):
    id: int
    bill_number: str
    service: str
    total_client: Decimal
    status: str
    created_at: datetime


class ReportResponse(BaseModel):
    start: datetime
    end: datetime
    summary: ReportSummary
    top_clients: list[TopClient]
    top_providers: list[TopProvider]
    recent_bills: list[RecentBill]
