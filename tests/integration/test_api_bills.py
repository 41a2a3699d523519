from decimal import Decimal

from fastapi.testclient import TestClient


def _approved_provider(client: TestClient, headers, make_application) -> int:
    application = make_application()
    resp = client.post(f"/api/applications/{application.id}/review", json={"status": "approved"}, headers=headers)
    return resp.json()["data"]["provider"]["id"]


def _client_company(client: TestClient, headers, client_json, **overrides) -> int:
    resp = client.post("/api/clients", json=client_json(**overrides), headers=headers)
    assert resp.status_code == 201
    return resp.json()["data"]["id"]


def _bill(client: TestClient, headers, client_id: int, provider_id: int, **overrides) -> dict:
    payload = {
        "client_id": client_id,
        "provider_id": provider_id,
        "service": "House Cleaning",
        "hours_worked": "4",
        "service_rate": "25.00",
    }
    payload.update(overrides)
    resp = client.post("/api/bills", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_bill_totals_use_client_terms(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)

    bill = _bill(client, auth_headers, client_id, provider_id)
    assert bill["bill_number"] == "BILL-0001"
    assert bill["status"] == "Pending"
    assert bill["client_name"] == "Acme Homes"
    assert bill["provider_name"] == "Maria Lopez"
    assert Decimal(bill["total_client"]) == Decimal("120.00")
    assert Decimal(bill["total_provider"]) == Decimal("90.00")
    assert Decimal(bill["profit"]) == Decimal("30.00")
    assert Decimal(bill["profit_margin"]) == Decimal("25.00")

    second = _bill(client, auth_headers, client_id, provider_id)
    assert second["bill_number"] == "BILL-0002"


def test_dollar_markup_without_commission(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json, markup_type="Dollar", markup_value="50", commission=None)

    bill = _bill(client, auth_headers, client_id, provider_id)
    assert Decimal(bill["total_client"]) == Decimal("150.00")
    assert Decimal(bill["total_provider"]) == Decimal("100.00")
    assert Decimal(bill["profit_margin"]) == Decimal("33.33")


def test_editing_hours_or_rate_recomputes_totals(
    client: TestClient, auth_headers, make_application, client_json
) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    bill = _bill(client, auth_headers, client_id, provider_id)

    hours = client.put(f"/api/bills/{bill['id']}", json={"hours_worked": "8"}, headers=auth_headers).json()["data"]
    assert Decimal(hours["total_client"]) == Decimal("240.00")
    assert Decimal(hours["total_provider"]) == Decimal("180.00")

    rate = client.put(f"/api/bills/{bill['id']}", json={"service_rate": "30"}, headers=auth_headers).json()["data"]
    assert Decimal(rate["hours_worked"]) == Decimal("8")
    assert Decimal(rate["total_client"]) == Decimal("288.00")
    assert Decimal(rate["total_provider"]) == Decimal("216.00")

    status = client.put(
        f"/api/bills/{bill['id']}", json={"status": "Paid", "paid_date": "2026-10-01"}, headers=auth_headers
    ).json()["data"]
    assert status["status"] == "Paid"
    assert status["paid_date"] == "2026-10-01"
    assert Decimal(status["total_client"]) == Decimal("288.00")
    assert status["bill_number"] == bill["bill_number"]

    totals = client.put(f"/api/bills/{bill['id']}", json={"total_client": "1"}, headers=auth_headers)
    assert totals.status_code == 422


def test_bill_requires_a_client_company(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    supplier = client.post("/api/suppliers", json=client_json(company_name="Parts Co"), headers=auth_headers)
    supplier_id = supplier.json()["data"]["id"]

    resp = client.post(
        "/api/bills",
        json={
            "client_id": supplier_id,
            "provider_id": provider_id,
            "service": "House Cleaning",
            "hours_worked": "1",
            "service_rate": "10",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 404

    missing_provider = client.post(
        "/api/bills",
        json={"client_id": supplier_id, "provider_id": 999, "service": "X", "hours_worked": "1", "service_rate": "10"},
        headers=auth_headers,
    )
    assert missing_provider.status_code == 404


def test_paid_bills_cannot_be_deleted(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    pending = _bill(client, auth_headers, client_id, provider_id)
    paid = _bill(client, auth_headers, client_id, provider_id)
    client.put(f"/api/bills/{paid['id']}", json={"status": "Paid"}, headers=auth_headers)

    refused = client.delete(f"/api/bills/{paid['id']}", headers=auth_headers)
    assert refused.status_code == 400
    assert refused.json()["message"] == "Cannot delete paid bills"

    assert client.delete(f"/api/bills/{pending['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/bills/{pending['id']}", headers=auth_headers).status_code == 404


def test_provider_and_client_with_bills_cannot_be_deleted(
    client: TestClient, auth_headers, make_application, client_json
) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    _bill(client, auth_headers, client_id, provider_id)

    assert client.delete(f"/api/providers/{provider_id}", headers=auth_headers).status_code == 409
    assert client.delete(f"/api/clients/{client_id}", headers=auth_headers).status_code == 409


def test_bill_listing_filters(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    acme = _client_company(client, auth_headers, client_json)
    other = _client_company(client, auth_headers, client_json, company_name="Blue Bay Hotel")
    _bill(client, auth_headers, acme, provider_id)
    _bill(client, auth_headers, other, provider_id, service="Cooking")

    by_client = client.get("/api/bills", params={"client_id": other}, headers=auth_headers).json()
    assert [row["client_name"] for row in by_client["data"]] == ["Blue Bay Hotel"]

    by_search = client.get("/api/bills", params={"search": "cook"}, headers=auth_headers).json()
    assert by_search["pagination"]["total"] == 1

    by_date = client.get("/api/bills", params={"start_date": "2000-01-01", "end_date": "2100-01-01"}, headers=auth_headers)
    assert by_date.json()["pagination"]["total"] == 2


def test_pdf_uses_stored_totals(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    bill = _bill(client, auth_headers, client_id, provider_id)

    resp = client.get(f"/api/bills/{bill['id']}/pdf", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'attachment; filename="bill-BILL-0001.pdf"'
    assert resp.content.startswith(b"%PDF")

    assert client.get("/api/bills/999/pdf", headers=auth_headers).status_code == 404


def test_reports_summarize_paid_bills(client: TestClient, auth_headers, make_application, client_json) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    paid = _bill(client, auth_headers, client_id, provider_id)
    _bill(client, auth_headers, client_id, provider_id)
    client.put(f"/api/bills/{paid['id']}", json={"status": "Paid"}, headers=auth_headers)

    report = client.get("/api/bills/reports", headers=auth_headers).json()["data"]
    summary = report["summary"]
    assert summary["total_bills"] == 2
    assert summary["paid_bills"] == 1
    assert summary["pending_bills"] == 1
    assert Decimal(summary["total_revenue"]) == Decimal("120.00")
    assert Decimal(summary["total_provider_payments"]) == Decimal("90.00")
    assert Decimal(summary["profit"]) == Decimal("30.00")
    assert Decimal(summary["profit_margin"]) == Decimal("25.00")

    assert report["top_clients"][0]["company_name"] == "Acme Homes"
    assert report["top_providers"][0]["name"] == "Maria Lopez"
    assert report["top_providers"][0]["bill_count"] == 2
    assert len(report["recent_bills"]) == 2


def test_bill_numbers_are_not_reused_after_delete(
    client: TestClient, auth_headers, make_application, client_json
) -> None:
    provider_id = _approved_provider(client, auth_headers, make_application)
    client_id = _client_company(client, auth_headers, client_json)
    first = _bill(client, auth_headers, client_id, provider_id)
    second = _bill(client, auth_headers, client_id, provider_id)
    assert client.delete(f"/api/bills/{second['id']}", headers=auth_headers).status_code == 200

    third = _bill(client, auth_headers, client_id, provider_id)
    assert [first["bill_number"], second["bill_number"], third["bill_number"]] == [
        "BILL-0001",
        "BILL-0002",
        "BILL-0003",
    ]
