from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from staffline.config import Settings, get_settings
from staffline.core.security import hash_password
from staffline.db.models import Job, Service, User

DEFAULT_CATALOG: list[dict[str, object]] = [
    {"name": "House Cleaning", "description": "Residential cleaning", "average_hourly_rate": Decimal("25.00")},
    {"name": "Office Cleaning", "description": "Commercial and office cleaning", "average_hourly_rate": Decimal("28.00")},
    {"name": "Babysitting", "description": "Child care at the client's home", "average_hourly_rate": Decimal("20.00")},
    {"name": "Elderly Care", "description": "Companion and personal care", "average_hourly_rate": Decimal("30.00")},
    {"name": "Cooking", "description": "Meal preparation and kitchen help", "average_hourly_rate": Decimal("27.00")},
    {"name": "Gardening", "description": "Lawn care and landscaping", "average_hourly_rate": Decimal("24.00")},
    {"name": "Moving Help", "description": "Packing, loading and unloading", "average_hourly_rate": Decimal("32.00")},
    {"name": "Event Staff", "description": "Serving and setup for events", "average_hourly_rate": Decimal("26.00")},
]


def seed_admin_user(session: Session, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    existing = session.scalar(select(User).where(User.username == settings.admin_username))
    if existing:
        return 0

    session.add(
        User(
            username=settings.admin_username,
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
            role="admin",
        )
    )
    session.commit()
    return 1


def seed_catalog(session: Session) -> int:
    inserted = 0
    for model in (Job, Service):
        for item in DEFAULT_CATALOG:
            existing = session.scalar(select(model).where(model.name == item["name"]))
            if existing:
                continue
            session.add(model(**item))
            inserted += 1
    session.commit()
    return inserted
