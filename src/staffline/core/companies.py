from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from staffline.core.errors import ConflictError, NotFoundError, ValidationError
from staffline.db.models import Company
from staffline.db.repositories import Repository
from staffline.types import CompanyCreate, CompanyUpdate

logger = logging.getLogger(__name__)


def get_company_or_404(session: Session, company_id: int, company_type: str) -> Company:
    company = Repository(session).get_company(company_id, company_type)
    if company is None:
        raise NotFoundError(f"{company_type.capitalize()} {company_id} not found")
    return company


def create_company(session: Session, company_type: str, payload: CompanyCreate) -> Company:
    company = Company(type=company_type, **payload.model_dump())
    company = Repository(session).save(company)
    logger.info("%s %s created: %s", company_type, company.id, company.company_name)
    return company


def update_company(session: Session, company_id: int, company_type: str, payload: CompanyUpdate) -> Company:
    company = get_company_or_404(session, company_id, company_type)
    changes = payload.model_dump(exclude_unset=True)

    markup_type = changes.get("markup_type", company.markup_type)
    markup_value = changes.get("markup_value", company.markup_value)
    if markup_type is not None and markup_value is None:
        raise ValidationError("markup_value is required when markup_type is set")

    for key, value in changes.items():
        if value is None and key not in {"markup_type", "markup_value", "commission"}:
            continue
        setattr(company, key, value)
    return Repository(session).save(company)


def delete_company(session: Session, company_id: int, company_type: str) -> None:
    company = get_company_or_404(session, company_id, company_type)
    repo = Repository(session)
    if repo.count_bills_for_client(company.id):
        raise ConflictError(f"{company_type.capitalize()} has bills and cannot be deleted")
    repo.delete(company)
    logger.info("%s %s deleted", company_type, company_id)
