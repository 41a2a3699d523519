from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffline.config import Settings, get_settings
from staffline.core.billing import calculate_bill, to_money
from staffline.core.errors import NotFoundError, StafflineError, TransactionError, ValidationError
from staffline.db.base import utcnow
from staffline.db.models import Application, ServiceProvider
from staffline.db.repositories import Repository
from staffline.types import ApplicationReview

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApprovalOutcome:
    application: Application
    provider: ServiceProvider | None
    provider_created: bool = False

    @property
    def message(self) -> str:
        if self.application.status == "rejected":
            return "Application rejected"
        if self.provider_created:
            return "Application approved and service provider created successfully"
        return "Application approved and service provider updated successfully"


def provider_hourly_rate(rate: Decimal) -> Decimal:
    """Provider pay for one hour at ``rate`` with no client terms applied."""
    return to_money(calculate_bill(1, rate).provider_total)


class ApprovalService:
    """Moves an application to approved/rejected and keeps its service provider in step.

    The application row and the provider row are written in one transaction.
    Re-reviewing an application that was already approved or rejected is
    allowed and runs the same steps again.
    """

    def __init__(self, session: Session, *, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)

    def review(
        self,
        application_id: int,
        review: ApplicationReview,
        *,
        reviewer_id: int | None,
    ) -> ApprovalOutcome:
        application = self.repo.get_application(application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")

        previous_status = application.status
        try:
            application.status = review.status
            application.reviewed_at = utcnow()
            application.reviewed_by = reviewer_id
            self.session.flush()

            provider = self.repo.get_provider_by_application(application.id)
            created = False
            if review.status == "approved":
                if provider is None:
                    provider = self._create_provider(application, review)
                    created = True
                else:
                    self._refresh_provider(provider, review)
            elif provider is not None:
                provider.active = False
                self.session.flush()

            self.session.commit()
        except StafflineError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning("review of application %s rolled back: %s", application_id, exc)
            raise TransactionError(f"Could not review application {application_id}") from exc

        self.session.refresh(application)
        if provider is not None:
            self.session.refresh(provider)
        logger.info(
            "application %s reviewed %s -> %s by user %s (provider=%s, created=%s)",
            application_id,
            previous_status,
            review.status,
            reviewer_id,
            provider.id if provider is not None else None,
            created,
        )
        return ApprovalOutcome(application=application, provider=provider, provider_created=created)

    def _create_provider(self, application: Application, review: ApplicationReview) -> ServiceProvider:
        services = review.services if review.services is not None else list(application.services_json or [])
        rate = review.hourly_rate if review.hourly_rate is not None else application.hourly_rate
        if not services or rate is None or rate <= 0:
            raise ValidationError("Services and hourly rate are required for approval")

        return self.repo.create_provider(
            application_id=application.id,
            services=services,
            hourly_rate=provider_hourly_rate(rate),
            assigned_to=review.assigned_to or self.settings.default_manager,
            commit=False,
        )

    def _refresh_provider(self, provider: ServiceProvider, review: ApplicationReview) -> None:
        if review.services:
            provider.services_json = list(review.services)
        if review.hourly_rate is not None:
            provider.hourly_rate = provider_hourly_rate(review.hourly_rate)
        if review.assigned_to:
            provider.assigned_to = review.assigned_to
        provider.active = True
        self.session.flush()
