from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

_DATA_DIR = Path(tempfile.mkdtemp(prefix="staffline-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_DATA_DIR / 'staffline.db'}"
os.environ["DATA_DIR"] = str(_DATA_DIR)
os.environ["UPLOAD_DIR"] = str(_DATA_DIR / "uploads")
os.environ["INVOICE_DIR"] = str(_DATA_DIR / "invoices")

import pytest
from fastapi.testclient import TestClient

from staffline.api.app import create_app
from staffline.db.base import Base
from staffline.db.models import Application, Company, ServiceProvider
from staffline.db.seed import seed_admin_user, seed_catalog
from staffline.db.session import SessionLocal, engine


@pytest.fixture(autouse=True)
def reset_db() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_admin_user(session)
        seed_catalog(session)
    yield


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}


def application_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "first_name": "Maria",
        "last_name": "Lopez",
        "email": "maria.lopez@example.com",
        "phone": "555-0100",
        "date_of_birth": "1990-04-12",
        "ssn": "123-45-6789",
        "gender": "Female",
        "english_level": 80,
        "has_drivers_license": True,
        "services": ["House Cleaning", "Cooking"],
        "hourly_rate": "25.00",
        "address1": "12 Elm Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "emergency_contact_name": "Ana Lopez",
        "emergency_contact_phone": "555-0101",
        "emergency_contact_relation": "Sister",
        "how_did_you_hear": "Friend",
    }
    payload.update(overrides)
    return payload


def client_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "company_name": "Acme Homes",
        "entity": "LLC",
        "street": "1 Market Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "markup_type": "Percent",
        "markup_value": "20",
        "commission": "10",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_application() -> Callable[..., Application]:
    def _make(**overrides: Any) -> Application:
        data = application_payload(**overrides)
        with SessionLocal() as db:
            application = Application(
                first_name=data["first_name"],
                last_name=data["last_name"],
                email=data["email"],
                phone=data["phone"],
                date_of_birth=date.fromisoformat(data["date_of_birth"]),
                ssn=data["ssn"],
                gender=data["gender"],
                english_level=data["english_level"],
                has_drivers_license=data["has_drivers_license"],
                services_json=list(data["services"]),
                hourly_rate=Decimal(data["hourly_rate"]) if data["hourly_rate"] is not None else None,
                address1=data["address1"],
                city=data["city"],
                state=data["state"],
                zip_code=data["zip_code"],
                emergency_contact_name=data["emergency_contact_name"],
                emergency_contact_phone=data["emergency_contact_phone"],
                emergency_contact_relation=data["emergency_contact_relation"],
                how_did_you_hear=data["how_did_you_hear"],
                status=data.get("status", "pending"),
            )
            db.add(application)
            db.commit()
            db.refresh(application)
            return application

    return _make


@pytest.fixture
def make_client() -> Callable[..., Company]:
    def _make(**overrides: Any) -> Company:
        data = client_payload(**overrides)
        with SessionLocal() as db:
            company = Company(
                type=data.pop("type", "client"),
                company_name=data["company_name"],
                entity=data["entity"],
                street=data["street"],
                city=data["city"],
                state=data["state"],
                zip_code=data["zip_code"],
                markup_type=data["markup_type"],
                markup_value=Decimal(data["markup_value"]) if data["markup_value"] is not None else None,
                commission=Decimal(data["commission"]) if data["commission"] is not None else None,
            )
            db.add(company)
            db.commit()
            db.refresh(company)
            return company

    return _make


@pytest.fixture
def make_provider() -> Callable[..., ServiceProvider]:
    def _make(application_id: int | None = None, hourly_rate: str = "25.00") -> ServiceProvider:
        with SessionLocal() as db:
            provider = ServiceProvider(
                application_id=application_id,
                services_json=["House Cleaning"],
                hourly_rate=Decimal(hourly_rate),
                assigned_to="Manager A",
                active=True,
            )
            db.add(provider)
            db.commit()
            db.refresh(provider)
            return provider

    return _make


@pytest.fixture
def application_json() -> Callable[..., dict[str, Any]]:
    return application_payload


@pytest.fixture
def client_json() -> Callable[..., dict[str, Any]]:
    return client_payload
