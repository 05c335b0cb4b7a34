from fastapi.testclient import TestClient

from main import create_app, seed_admin


def test_seed_admin_is_idempotent(context, settings):
    first = seed_admin(context, settings)
    assert first["role"] == "admin"
    assert seed_admin(context, settings) is None
    assert context.accounts.count({"email": settings.admin_email}) == 1
    assert context.employees.count() == 1


def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.json()["message"]


def test_database_status(client):
    body = client.get("/test").json()
    assert body["connection_status"] == "Connected"
    assert "users" in body["collections"]


def test_missing_context_answers_503(settings):
    client = TestClient(create_app(settings=settings))
    assert client.get("/restaurants/").status_code == 503


def test_validation_errors_are_400(client, admin):
    response = client.post("/restaurants/", headers=admin, json={"name": "No address"})
    assert response.status_code == 400
    assert isinstance(response.json()["detail"], list)


def test_cors_headers(client):
    response = client.get("/", headers={"Origin": "http://localhost:3000"})
    assert response.headers["access-control-allow-origin"] in ("*", "http://localhost:3000")
