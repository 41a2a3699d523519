from __future__ import annotations

from pathlib import Path

from staffline.config import get_settings
from staffline.db.base import Base
from staffline.db.session import SessionLocal, engine
from staffline.db import models  # noqa: F401
from staffline.db.seed import seed_admin_user, seed_catalog


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [
        settings.data_dir,
        settings.upload_dir,
        settings.invoice_dir,
    ]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        users = seed_admin_user(session)
        catalog = seed_catalog(session)
    return {"seeded_users": users, "seeded_catalog_items": catalog}
