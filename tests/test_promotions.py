from datetime import datetime, timedelta, timezone


def window(start_days, end_days):
    now = datetime.now(timezone.utc)
    return {
        "start_date": (now + timedelta(days=start_days)).isoformat(),
        "end_date": (now + timedelta(days=end_days)).isoformat(),
    }


def test_end_before_start_is_400(client, admin):
    response = client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 2, **window(5, 1)})
    assert response.status_code == 400


def test_percentage_above_100_is_400(client, admin):
    response = client.post("/promotions/", headers=admin, json={"type": "percentage", "value": 150, **window(0, 1)})
    assert response.status_code == 400


def test_unknown_type_is_400(client, admin):
    response = client.post("/promotions/", headers=admin, json={"type": "bogo", "value": 1, **window(0, 1)})
    assert response.status_code == 400


def test_creator_is_responsible(client, admin):
    me = client.get("/auth/me", headers=admin).json()
    promotion = client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 2, **window(-1, 1)}).json()
    assert promotion["responsible"] == me["employee"]["_id"]


def test_active_filter(client, admin):
    current = client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 1, **window(-1, 1)}).json()
    client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 2, **window(3, 6)})
    assert len(client.get("/promotions/").json()) == 2
    assert [p["_id"] for p in client.get("/promotions/", params={"active": True}).json()] == [current["_id"]]


def test_manager_limited_to_own_restaurant(client, hire, open_restaurant):
    mine = open_restaurant("Mine")
    other = open_restaurant("Other")
    _, manager = hire("boss@esgiking.fr", "manager", mine["_id"])
    body = {"type": "fixed", "value": 1, **window(0, 1)}
    assert client.post("/promotions/", headers=manager, json=dict(body, restaurant=mine["_id"])).status_code == 200
    assert client.post("/promotions/", headers=manager, json=dict(body, restaurant=other["_id"])).status_code == 403


def test_customer_cannot_create(client, signup):
    _, headers = signup("alice@example.com")
    assert client.post("/promotions/", headers=headers, json={"type": "fixed", "value": 1, **window(0, 1)}).status_code == 403


def test_update_and_delete(client, admin):
    promotion = client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 1, **window(0, 1)}).json()
    updated = client.put(f"/promotions/{promotion['_id']}", headers=admin,
                         json={"type": "percentage", "value": 30, **window(0, 2)})
    assert updated.status_code == 200
    assert updated.json()["type"] == "percentage"
    assert client.delete(f"/promotions/{promotion['_id']}", headers=admin).status_code == 204
    assert client.delete(f"/promotions/{promotion['_id']}", headers=admin).status_code == 404


def test_foreign_manager_cannot_edit_or_delete(client, admin, context, hire, open_restaurant):
    mine = open_restaurant("Mine")
    other = open_restaurant("Other")
    _, manager = hire("boss@esgiking.fr", "manager", mine["_id"])
    promotion = client.post("/promotions/", headers=admin, json={
        "type": "fixed", "value": 1, "restaurant": other["_id"], **window(0, 1),
    }).json()

    url = f"/promotions/{promotion['_id']}"
    hijack = {"type": "percentage", "value": 99, **window(0, 1)}
    assert client.put(url, headers=manager, json=hijack).status_code == 403
    assert client.delete(url, headers=manager).status_code == 403
    stored = context.promotions.find_by_id(promotion["_id"])
    assert stored["restaurant"] == other["_id"]
    assert stored["value"] == 1


def test_owner_manager_edit_keeps_restaurant(client, hire, open_restaurant):
    mine = open_restaurant("Mine")
    _, manager = hire("boss@esgiking.fr", "manager", mine["_id"])
    promotion = client.post("/promotions/", headers=manager, json={
        "type": "fixed", "value": 1, "restaurant": mine["_id"], **window(0, 1),
    }).json()
    updated = client.put(f"/promotions/{promotion['_id']}", headers=manager,
                         json={"type": "fixed", "value": 3, **window(0, 1)})
    assert updated.status_code == 200
    assert updated.json()["restaurant"] == mine["_id"]
    assert client.delete(f"/promotions/{promotion['_id']}", headers=manager).status_code == 204


def test_unscoped_promotion_belongs_to_its_creator(client, admin, hire):
    _, manager = hire("boss@esgiking.fr", "manager")
    promotion = client.post("/promotions/", headers=admin, json={"type": "fixed", "value": 1, **window(0, 1)}).json()
    assert client.delete(f"/promotions/{promotion['_id']}", headers=manager).status_code == 403
