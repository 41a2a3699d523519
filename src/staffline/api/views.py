from __future__ import annotations

from staffline.api.schemas import BillResponse, Pagination, ProviderResponse
from staffline.db.models import Application, Bill, ServiceProvider
from staffline.db.repositories import Page, Repository


def pagination(page: Page) -> Pagination:
    return Pagination(page=page.page, limit=page.limit, total=page.total, pages=page.pages)


def provider_name(provider: ServiceProvider, application: Application | None) -> str:
    return application.full_name if application else f"Provider #{provider.id}"


def provider_view(provider: ServiceProvider, application: Application | None) -> ProviderResponse:
    return ProviderResponse(
        id=provider.id,
        application_id=provider.application_id,
        name=provider_name(provider, application),
        email=application.email if application else "",
        phone=application.phone if application else "",
        services=list(provider.services_json or []),
        hourly_rate=provider.hourly_rate,
        assigned_to=provider.assigned_to,
        active=provider.active,
        english_level=application.english_level if application else None,
        has_license=application.has_drivers_license if application else None,
        created_at=provider.created_at,
        updated_at=provider.updated_at,
    )


def load_provider_view(repo: Repository, provider: ServiceProvider) -> ProviderResponse:
    application = repo.get_application(provider.application_id) if provider.application_id else None
    return provider_view(provider, application)


def bill_view(repo: Repository, bill: Bill) -> BillResponse:
    client = repo.get_company(bill.client_id)
    provider = repo.get_provider(bill.provider_id)
    application = None
    if provider is not None and provider.application_id:
        application = repo.get_application(provider.application_id)

    return BillResponse(
        id=bill.id,
        bill_number=bill.bill_number,
        client_id=bill.client_id,
        client_name=client.company_name if client else "",
        provider_id=bill.provider_id,
        provider_name=provider_name(provider, application) if provider else "",
        service=bill.service,
        hours_worked=bill.hours_worked,
        service_rate=bill.service_rate,
        total_client=bill.total_client,
        total_provider=bill.total_provider,
        profit=bill.total_client - bill.total_provider,
        profit_margin=bill.profit_margin,
        status=bill.status,
        due_date=bill.due_date,
        paid_date=bill.paid_date,
        created_at=bill.created_at,
        updated_at=bill.updated_at,
    )
