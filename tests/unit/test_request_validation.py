from decimal import Decimal

import pytest
from pydantic import ValidationError

from staffline.types import ApplicationCreate, ApplicationReview, BillCreate, BillUpdate, CompanyCreate


def _application(**overrides):
    data = {
        "first_name": "Maria",
        "last_name": "Lopez",
        "email": "Maria.Lopez@Example.com",
        "phone": "555-0100",
        "date_of_birth": "1990-04-12",
        "ssn": "123-45-6789",
        "gender": "Female",
        "english_level": 80,
        "services": ["House Cleaning"],
        "address1": "12 Elm Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "emergency_contact_name": "Ana Lopez",
        "emergency_contact_phone": "555-0101",
        "emergency_contact_relation": "Sister",
        "how_did_you_hear": "Friend",
    }
    data.update(overrides)
    return data


def test_application_normalizes_email_and_services() -> None:
    model = ApplicationCreate(**_application(services=[" Cooking ", "Cooking", "", "Gardening"]))
    assert model.email == "maria.lopez@example.com"
    assert model.services == ["Cooking", "Gardening"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"services": []},
        {"services": ["  "]},
        {"english_level": 101},
        {"email": "not-an-email"},
        {"gender": "Unknown"},
        {"hourly_rate": "-5"},
    ],
)
def test_application_rejects_invalid_fields(overrides) -> None:
    with pytest.raises(ValidationError):
        ApplicationCreate(**_application(**overrides))


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ApplicationReview(status="approved", isAdmin=True)
    with pytest.raises(ValidationError):
        BillUpdate(total_client="1.00")


def test_review_status_is_limited_to_terminal_states() -> None:
    with pytest.raises(ValidationError):
        ApplicationReview(status="pending")
    review = ApplicationReview(status="approved", hourly_rate="30.50")
    assert review.hourly_rate == Decimal("30.50")


def test_company_markup_type_requires_value() -> None:
    base = {"company_name": "Acme", "entity": "LLC", "street": "1 Main", "city": "X", "state": "IL", "zip_code": "1"}
    with pytest.raises(ValidationError):
        CompanyCreate(**base, markup_type="Percent")
    with pytest.raises(ValidationError):
        CompanyCreate(**base, commission="150")
    company = CompanyCreate(**base, markup_type="Dollar", markup_value="50", commission="10")
    assert company.markup_value == Decimal("50")


def test_bill_requires_positive_hours_and_rate() -> None:
    with pytest.raises(ValidationError):
        BillCreate(client_id=1, provider_id=1, service="Cooking", hours_worked="0", service_rate="20")
    with pytest.raises(ValidationError):
        BillCreate(client_id=1, provider_id=1, service="Cooking", hours_worked="2", service_rate="-1")
