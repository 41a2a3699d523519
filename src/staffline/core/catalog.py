from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffline.core.errors import ConflictError, NotFoundError
from staffline.db.models import Job, Service
from staffline.db.repositories import CatalogModel, Repository
from staffline.types import CatalogItemCreate, CatalogItemUpdate

CATALOG_MODELS: dict[str, CatalogModel] = {"job": Job, "service": Service}


def _label(model: CatalogModel) -> str:
    return "Job" if model is Job else "Service"


def get_item_or_404(session: Session, model: CatalogModel, item_id: int) -> Job | Service:
    item = Repository(session).get_catalog_item(model, item_id)
    if item is None:
        raise NotFoundError(f"{_label(model)} {item_id} not found")
    return item


def _ensure_unique_name(repo: Repository, model: CatalogModel, name: str, item_id: int | None = None) -> None:
    existing = repo.get_catalog_item_by_name(model, name)
    if existing is not None and existing.id != item_id:
        raise ConflictError(f"A {_label(model).lower()} with this name already exists")


def create_item(session: Session, model: CatalogModel, payload: CatalogItemCreate) -> Job | Service:
    repo = Repository(session)
    _ensure_unique_name(repo, model, payload.name)
    try:
        return repo.save(model(**payload.model_dump()))
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(f"A {_label(model).lower()} with this name already exists") from exc


def update_item(session: Session, model: CatalogModel, item_id: int, payload: CatalogItemUpdate) -> Job | Service:
    repo = Repository(session)
    item = get_item_or_404(session, model, item_id)
    if payload.name is not None:
        _ensure_unique_name(repo, model, payload.name, item_id=item.id)
    for key, value in payload.model_dump(exclude_none=True).items():
        setattr(item, key, value)
    return repo.save(item)


def delete_item(session: Session, model: CatalogModel, item_id: int) -> None:
    item = get_item_or_404(session, model, item_id)
    Repository(session).delete(item)
