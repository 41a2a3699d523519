from fastapi.testclient import TestClient


def _register(client: TestClient, headers, **overrides):
    payload = {"username": "jordan", "email": "jordan@example.com", "password": "manager-pass", "role": "manager"}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload, headers=headers)


def _login(client: TestClient, username: str, password: str) -> dict[str, str]:
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}


def test_admin_registers_manager_who_can_log_in(client: TestClient, auth_headers) -> None:
    created = _register(client, auth_headers)
    assert created.status_code == 201
    user = created.json()["data"]
    assert user["username"] == "jordan"
    assert user["role"] == "manager"
    assert "password" not in user
    assert "password_hash" not in user

    manager = _login(client, "jordan", "manager-pass")
    me = client.get("/api/auth/me", headers=manager).json()["data"]
    assert me["role"] == "manager"

    logout = client.post("/api/auth/logout", headers=manager)
    assert logout.status_code == 200
    assert logout.json()["message"] == "Logout successful"


def test_register_rejects_duplicates_and_bad_payloads(client: TestClient, auth_headers) -> None:
    assert _register(client, auth_headers).status_code == 201
    assert _register(client, auth_headers, email="other@example.com").status_code == 409
    assert _register(client, auth_headers, username="other", email="JORDAN@example.com").status_code == 409
    assert _register(client, auth_headers, username="sam", email="sam@example.com", password="short").status_code == 422
    assert _register(client, auth_headers, username="sam", email="sam@example.com", role="owner").status_code == 422
    assert _register(client, auth_headers, username="sam", email="sam@example.com", active=False).status_code == 422


def test_register_requires_admin(client: TestClient, auth_headers) -> None:
    assert _register(client, {}).status_code == 401
    _register(client, auth_headers)
    manager = _login(client, "jordan", "manager-pass")
    refused = _register(client, manager, username="sam", email="sam@example.com")
    assert refused.status_code == 403
    assert refused.json()["error"] == "permission_denied"


def test_manager_is_refused_at_admin_only_deletes(
    client: TestClient, auth_headers, make_application, make_client
) -> None:
    _register(client, auth_headers)
    manager = _login(client, "jordan", "manager-pass")
    application = make_application()
    company = make_client()

    assert client.delete(f"/api/applications/{application.id}", headers=manager).status_code == 403
    assert client.delete(f"/api/clients/{company.id}", headers=manager).status_code == 403
    assert client.delete("/api/jobs/1", headers=manager).status_code == 403

    # managers keep the non-destructive endpoints
    assert client.get(f"/api/applications/{application.id}", headers=manager).status_code == 200
    assert client.delete(f"/api/clients/{company.id}", headers=auth_headers).status_code == 200
