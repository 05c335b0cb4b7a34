from fastapi.testclient import TestClient

from tests.conftest import account_payload


def test_deliveryman_gets_a_tracker(client, context, hire):
    employee, _ = hire("driver@esgiking.fr", "deliveryman")
    tracker = context.trackers.find_by_employee(employee["_id"])
    assert tracker is not None
    assert employee["tracker"] == tracker["_id"]


def test_preparer_has_no_tracker(context, hire):
    employee, _ = hire("prep@esgiking.fr", "preparer")
    assert employee.get("tracker") is None
    assert context.trackers.count() == 0


def test_employee_joins_its_restaurant(context, hire, open_restaurant):
    restaurant = open_restaurant()
    employee, _ = hire("boss@esgiking.fr", "manager", restaurant["_id"])
    assert employee["restaurant"] == restaurant["_id"]
    assert employee["_id"] in context.restaurants.find_by_id(restaurant["_id"])["employees"]


def test_unknown_restaurant_is_404(client, admin, context):
    response = client.post("/employees/", headers=admin, json={
        "user": account_payload("lost@esgiking.fr"),
        "employee": {"role": "manager", "restaurant": "5f1d7f1d7f1d7f1d7f1d7f1d"},
    })
    assert response.status_code == 404
    assert context.accounts.find_by_email("lost@esgiking.fr") is None


def test_unknown_role_is_400(client, admin):
    response = client.post("/employees/", headers=admin, json={
        "user": account_payload("chef@esgiking.fr"),
        "employee": {"role": "chef"},
    })
    assert response.status_code == 400


def test_duplicate_email_is_409(client, admin, context, hire):
    hire("driver@esgiking.fr", "deliveryman")
    response = client.post("/employees/", headers=admin, json={
        "user": account_payload("driver@esgiking.fr"),
        "employee": {"role": "deliveryman"},
    })
    assert response.status_code == 409
    assert context.employees.count({"role": "deliveryman"}) == 1
    assert context.trackers.count() == 1


def test_failed_tracker_rolls_back_the_employee(client, admin, context, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("tracker store down")

    monkeypatch.setattr(context.trackers, "create", broken)
    client_no_raise = TestClient(client.app, raise_server_exceptions=False)
    response = client_no_raise.post("/employees/", headers=admin, json={
        "user": account_payload("driver@esgiking.fr"),
        "employee": {"role": "deliveryman"},
    })
    assert response.status_code == 500
    assert context.accounts.find_by_email("driver@esgiking.fr") is None
    assert context.employees.count({"role": "deliveryman"}) == 0


def test_lookup_by_email_hides_password(client, admin, hire):
    hire("prep@esgiking.fr", "preparer")
    response = client.get("/employees/", headers=admin, params={"email": "prep@esgiking.fr"})
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "prep@esgiking.fr"
    assert "password_hash" not in response.json()["user"]
    assert client.get("/employees/", headers=admin, params={"email": "nobody@esgiking.fr"}).status_code == 404


def test_delete_employee_removes_account_and_tracker(client, admin, context, hire, open_restaurant):
    restaurant = open_restaurant()
    employee, _ = hire("driver@esgiking.fr", "deliveryman", restaurant["_id"])
    assert client.delete("/employees/driver@esgiking.fr", headers=admin).status_code == 204
    assert context.employees.find_by_id(employee["_id"]) is None
    assert context.accounts.find_by_email("driver@esgiking.fr") is None
    assert context.trackers.count() == 0
    assert employee["_id"] not in context.restaurants.find_by_id(restaurant["_id"])["employees"]
    assert client.delete("/employees/driver@esgiking.fr", headers=admin).status_code == 404


def test_delete_account_pulls_employee_from_restaurant(client, admin, context, hire, open_restaurant):
    restaurant = open_restaurant()
    employee, _ = hire("prep@esgiking.fr", "preparer", restaurant["_id"])
    assert client.delete(f"/users/{employee['user']}", headers=admin).status_code == 204
    assert context.employees.find_by_id(employee["_id"]) is None
    assert context.restaurants.find_by_id(restaurant["_id"])["employees"] == []
