from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffline.core.approval import provider_hourly_rate
from staffline.core.errors import ConflictError, NotFoundError, ValidationError
from staffline.db.models import ServiceProvider
from staffline.db.repositories import Repository
from staffline.types import ProviderCreate, ProviderUpdate

logger = logging.getLogger(__name__)


def get_provider_or_404(session: Session, provider_id: int) -> ServiceProvider:
    provider = Repository(session).get_provider(provider_id)
    if provider is None:
        raise NotFoundError(f"Service provider {provider_id} not found")
    return provider


def create_provider(session: Session, payload: ProviderCreate) -> ServiceProvider:
    """Create-only path: fails if the application already has a provider."""
    repo = Repository(session)
    application = repo.get_application(payload.application_id)
    if application is None:
        raise NotFoundError(f"Application {payload.application_id} not found")
    if application.status != "approved":
        raise ValidationError("Application must be approved to create service provider")
    if repo.get_provider_by_application(application.id) is not None:
        raise ConflictError("Service provider already exists for this application")

    try:
        provider = repo.create_provider(
            application_id=application.id,
            services=payload.services,
            hourly_rate=provider_hourly_rate(payload.hourly_rate),
            assigned_to=payload.assigned_to,
        )
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError("Service provider already exists for this application") from exc

    logger.info("service provider %s created for application %s", provider.id, application.id)
    return provider


def update_provider(session: Session, provider_id: int, payload: ProviderUpdate) -> ServiceProvider:
    provider = get_provider_or_404(session, provider_id)
    if payload.services is not None:
        provider.services_json = payload.services
    if payload.hourly_rate is not None:
        provider.hourly_rate = provider_hourly_rate(payload.hourly_rate)
    if payload.assigned_to is not None:
        provider.assigned_to = payload.assigned_to
    if payload.active is not None:
        provider.active = payload.active
    return Repository(session).save(provider)


def delete_provider(session: Session, provider_id: int) -> None:
    provider = get_provider_or_404(session, provider_id)
    repo = Repository(session)
    if repo.count_bills_for_provider(provider.id):
        raise ConflictError("Service provider has bills; deactivate it instead")
    repo.delete(provider)
    logger.info("service provider %s deleted", provider_id)
