"""PDF invoices for bills.

The renderer only formats what is stored on the bill; totals and margin come
from the values computed when the bill was created or last edited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session

from staffline.config import Settings, get_settings
from staffline.core.bills import BillingService
from staffline.core.errors import NotFoundError
from staffline.db.repositories import Repository

logger = logging.getLogger(__name__)

MARGIN = 56


@dataclass(slots=True)
class InvoiceData:
    bill_number: str
    status: str
    issued_at: datetime
    due_date: date | None
    paid_date: date | None
    client_name: str
    client_entity: str
    client_address: str
    markup_label: str
    commission_label: str
    provider_name: str
    provider_email: str
    provider_phone: str
    service: str
    hours_worked: Decimal
    service_rate: Decimal
    total_client: Decimal
    total_provider: Decimal
    profit_margin: Decimal

    @property
    def profit(self) -> Decimal:
        return self.total_client - self.total_provider

    @property
    def filename(self) -> str:
        return f"bill-{self.bill_number}.pdf"


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def build_invoice(session: Session, bill_id: int) -> InvoiceData:
    bill = BillingService(session).get_bill(bill_id)
    repo = Repository(session)
    client = repo.get_company(bill.client_id)
    provider = repo.get_provider(bill.provider_id)
    if client is None or provider is None:
        raise NotFoundError(f"Bill {bill_id} references a missing client or provider")

    application = repo.get_application(provider.application_id) if provider.application_id else None
    if client.markup_type and client.markup_value is not None:
        markup_label = (
            f"{client.markup_value}%" if client.markup_type == "Percent" else _money(client.markup_value)
        )
    else:
        markup_label = "None"

    address = ", ".join(
        part for part in (client.street, client.suite, client.city, client.state, client.zip_code) if part
    )
    return InvoiceData(
        bill_number=bill.bill_number,
        status=bill.status,
        issued_at=bill.created_at,
        due_date=bill.due_date,
        paid_date=bill.paid_date,
        client_name=client.company_name,
        client_entity=client.entity,
        client_address=address,
        markup_label=markup_label,
        commission_label=f"{client.commission}%" if client.commission is not None else "None",
        provider_name=application.full_name if application else f"Provider #{provider.id}",
        provider_email=application.email if application else "",
        provider_phone=application.phone if application else "",
        service=bill.service,
        hours_worked=bill.hours_worked,
        service_rate=bill.service_rate,
        total_client=bill.total_client,
        total_provider=bill.total_provider,
        profit_margin=bill.profit_margin,
    )


def render_invoice_pdf(invoice: InvoiceData, *, settings: Settings | None = None) -> bytes:
    settings = settings or get_settings()
    output = BytesIO()
    pdf = canvas.Canvas(output, pagesize=A4)
    pdf.setTitle(f"Invoice {invoice.bill_number}")
    _, height = A4
    y = height - MARGIN

    def line(text: str, *, font: str = "Helvetica", size: int = 10, gap: int = 16, x: int = MARGIN) -> None:
        nonlocal y
        pdf.setFont(font, size)
        pdf.drawString(x, y, text)
        y -= gap

    line(settings.company_name, font="Helvetica-Bold", size=16, gap=18)
    line(settings.company_address, gap=30)

    line(f"INVOICE {invoice.bill_number}", font="Helvetica-Bold", size=14, gap=20)
    line(f"Status: {invoice.status}")
    line(f"Issued: {invoice.issued_at:%Y-%m-%d}")
    line(f"Due: {invoice.due_date.isoformat() if invoice.due_date else 'On receipt'}")
    if invoice.paid_date:
        line(f"Paid: {invoice.paid_date.isoformat()}")
    y -= 10

    line("Bill to", font="Helvetica-Bold", size=12)
    line(f"{invoice.client_name} ({invoice.client_entity})")
    line(invoice.client_address, gap=26)

    line("Service provider", font="Helvetica-Bold", size=12)
    line(invoice.provider_name)
    for contact in (invoice.provider_email, invoice.provider_phone):
        if contact:
            line(contact)
    y -= 10

    line("Service", font="Helvetica-Bold", size=12)
    line(invoice.service)
    line(f"Hours worked: {invoice.hours_worked}")
    line(f"Rate: {_money(invoice.service_rate)}/hour", gap=26)

    line("Summary", font="Helvetica-Bold", size=12)
    line(f"Markup: {invoice.markup_label}")
    line(f"Commission: {invoice.commission_label}")
    line(f"Total due from client: {_money(invoice.total_client)}", font="Helvetica-Bold")
    line(f"Provider payment: {_money(invoice.total_provider)}")
    line(f"Profit: {_money(invoice.profit)} ({invoice.profit_margin}%)")

    pdf.showPage()
    pdf.save()
    return output.getvalue()


def generate_bill_pdf(session: Session, bill_id: int, *, settings: Settings | None = None) -> tuple[str, bytes]:
    invoice = build_invoice(session, bill_id)
    content = render_invoice_pdf(invoice, settings=settings)
    logger.info("rendered invoice %s (%d bytes)", invoice.bill_number, len(content))
    return invoice.filename, content


def write_bill_pdf(session: Session, bill_id: int, *, settings: Settings | None = None) -> Path:
    settings = settings or get_settings()
    filename, content = generate_bill_pdf(session, bill_id, settings=settings)
    settings.invoice_dir.mkdir(parents=True, exist_ok=True)
    path = settings.invoice_dir / filename
    path.write_bytes(content)
    return path
