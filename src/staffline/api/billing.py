from __future__ import annotations

from datetime import UTC, date, datetime, time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from staffline.api.deps import get_current_user, get_db, require_admin
from staffline.api.schemas import (
    BillResponse,
    CompanyResponse,
    Envelope,
    PageEnvelope,
    RecentBill,
    ReportResponse,
    ReportSummary,
    TopClient,
    TopProvider,
)
from staffline.api.views import bill_view, pagination, provider_name
from staffline.core import companies
from staffline.core.bills import BillingService
from staffline.core.invoices import generate_bill_pdf
from staffline.db.models import User
from staffline.db.repositories import Repository
from staffline.types import BillCreate, BillStatus, BillUpdate, CompanyCreate, CompanyUpdate

router = APIRouter(prefix="/api", tags=["billing"])


def _day_start(value: date | None) -> datetime | None:
    return datetime.combine(value, time.min, tzinfo=UTC) if value else None


def _day_end(value: date | None) -> datetime | None:
    return datetime.combine(value, time.max, tzinfo=UTC) if value else None


def _register_company_routes(company_type: str, plural: str) -> None:
    label = company_type.capitalize()

    @router.get(f"/{plural}", response_model=PageEnvelope[CompanyResponse], name=f"list_{plural}")
    def list_companies(
        active: bool | None = None,
        search: str | None = None,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> PageEnvelope[CompanyResponse]:
        result = Repository(db).list_companies(company_type, active=active, search=search, page=page, limit=limit)
        return PageEnvelope(
            message=f"{label}s retrieved successfully",
            data=[CompanyResponse.model_validate(row) for row in result.items],
            pagination=pagination(result),
        )

    @router.get(f"/{plural}/{{company_id}}", response_model=Envelope[CompanyResponse], name=f"get_{company_type}")
    def get_company(
        company_id: int,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CompanyResponse]:
        company = companies.get_company_or_404(db, company_id, company_type)
        return Envelope(message=f"{label} retrieved successfully", data=CompanyResponse.model_validate(company))

    @router.post(
        f"/{plural}", response_model=Envelope[CompanyResponse], status_code=201, name=f"create_{company_type}"
    )
    def create_company(
        payload: CompanyCreate,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CompanyResponse]:
        company = companies.create_company(db, company_type, payload)
        return Envelope(message=f"{label} created successfully", data=CompanyResponse.model_validate(company))

    @router.put(
        f"/{plural}/{{company_id}}", response_model=Envelope[CompanyResponse], name=f"update_{company_type}"
    )
    def update_company(
        company_id: int,
        payload: CompanyUpdate,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CompanyResponse]:
        company = companies.update_company(db, company_id, company_type, payload)
        return Envelope(message=f"{label} updated successfully", data=CompanyResponse.model_validate(company))

    @router.delete(f"/{plural}/{{company_id}}", response_model=Envelope[None], name=f"delete_{company_type}")
    def delete_company(
        company_id: int,
        db: Session = Depends(get_db),
        _: User = Depends(require_admin),
    ) -> Envelope[None]:
        companies.delete_company(db, company_id, company_type)
        return Envelope(message=f"{label} deleted successfully")


_register_company_routes("client", "clients")
_register_company_routes("supplier", "suppliers")
_register_company_routes("customer", "customers")


# bills


@router.get("/bills", response_model=PageEnvelope[BillResponse])
def list_bills(
    status: BillStatus | None = None,
    client_id: int | None = None,
    provider_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> PageEnvelope[BillResponse]:
    repo = Repository(db)
    result = repo.list_bills(
        status=status,
        client_id=client_id,
        provider_id=provider_id,
        start=_day_start(start_date),
        end=_day_end(end_date),
        search=search,
        page=page,
        limit=limit,
    )
    return PageEnvelope(
        message="Bills retrieved successfully",
        data=[bill_view(repo, row) for row in result.items],
        pagination=pagination(result),
    )


@router.get("/bills/reports", response_model=Envelope[ReportResponse])
def bill_reports(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ReportResponse]:
    repo = Repository(db)
    report = BillingService(db).report(start=_day_start(start_date), end=_day_end(end_date))
    applications = repo.provider_applications([row[0] for row in report.top_providers])

    return Envelope(
        message="Reports retrieved successfully",
        data=ReportResponse(
            start=report.start,
            end=report.end,
            summary=ReportSummary(
                total_bills=report.total_bills,
                paid_bills=report.paid_bills,
                pending_bills=report.pending_bills,
                overdue_bills=report.overdue_bills,
                total_revenue=report.total_revenue,
                total_provider_payments=report.total_provider_payments,
                profit=report.profit,
                profit_margin=report.profit_margin,
                average_bill_value=report.average_bill_value,
            ),
            top_clients=[
                TopClient(client_id=c.id, company_name=c.company_name, total_revenue=total, bill_count=count)
                for c, total, count in report.top_clients
            ],
            top_providers=[
                TopProvider(
                    provider_id=p.id,
                    name=provider_name(p, applications.get(p.application_id)),
                    total_earnings=total,
                    bill_count=count,
                )
                for p, total, count in report.top_providers
            ],
            recent_bills=[
                RecentBill(
                    id=bill.id,
                    bill_number=bill.bill_number,
                    service=bill.service,
                    total_client=bill.total_client,
                    status=bill.status,
                    created_at=bill.created_at,
                )
                for bill in report.recent_bills
            ],
        ),
    )


@router.get("/bills/{bill_id}", response_model=Envelope[BillResponse])
def get_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[BillResponse]:
    bill = BillingService(db).get_bill(bill_id)
    return Envelope(message="Bill retrieved successfully", data=bill_view(Repository(db), bill))


@router.post("/bills", response_model=Envelope[BillResponse], status_code=201)
def create_bill(
    payload: BillCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[BillResponse]:
    bill = BillingService(db).create_bill(payload)
    return Envelope(message="Bill created successfully", data=bill_view(Repository(db), bill))


@router.put("/bills/{bill_id}", response_model=Envelope[BillResponse])
def update_bill(
    bill_id: int,
    payload: BillUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[BillResponse]:
    bill = BillingService(db).update_bill(bill_id, payload)
    return Envelope(message="Bill updated successfully", data=bill_view(Repository(db), bill))


@router.delete("/bills/{bill_id}", response_model=Envelope[None])
def delete_bill(
    bill_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[None]:
    BillingService(db).delete_bill(bill_id)
    return Envelope(message="Bill deleted successfully")


@router.get("/bills/{bill_id}/pdf")
def download_bill_pdf(
    bill_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Response:
    filename, content = generate_bill_pdf(db, bill_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
