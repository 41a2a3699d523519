from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffline.core.errors import ConflictError, NotFoundError
from staffline.db.models import Application
from staffline.db.repositories import Repository
from staffline.types import ApplicationCreate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "An application with this email already exists"


def submit_application(session: Session, payload: ApplicationCreate) -> Application:
    repo = Repository(session)
    if repo.get_application_by_email(payload.email):
        raise ConflictError(DUPLICATE_EMAIL)

    values = payload.model_dump(exclude={"services", "work_experience"})
    application = Application(
        **values,
        services_json=payload.services,
        work_experience_json=payload.work_experience,
        status="pending",
    )
    try:
        repo.save(application)
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(DUPLICATE_EMAIL) from exc

    logger.info("application %s submitted for %s", application.id, ", ".join(payload.services))
    return application


def get_application_or_404(session: Session, application_id: int) -> Application:
    application = Repository(session).get_application(application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    return application


def delete_application(session: Session, application_id: int) -> None:
    application = get_application_or_404(session, application_id)
    Repository(session).delete_application(application)
    logger.info("application %s deleted", application_id)
