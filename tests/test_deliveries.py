import pytest

from dispatch import assign_courier, find_nearest_courier


@pytest.fixture
def restaurant(open_restaurant):
    return open_restaurant(longitude=0.0, latitude=0.0)


@pytest.fixture
def order(client, signup, restaurant, catalog):
    _, headers = signup("alice@example.com")
    response = client.post("/orders/", headers=headers, json={
        "restaurant": restaurant["_id"],
        "items": [{"type": "product", "item": catalog["product"]["_id"], "quantity": 1}],
    })
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def couriers(context, hire):
    """Two deliverymen, one 1 degree east of the restaurant, one 5 degrees east."""
    near, near_headers = hire("near@esgiking.fr", "deliveryman")
    far, _ = hire("far@esgiking.fr", "deliveryman")
    context.trackers.update_location(near["tracker"], 1.0, 0.0)
    context.trackers.update_location(far["tracker"], 5.0, 0.0)
    return near, far, near_headers


def new_delivery(client, headers, order, **extra):
    body = {"order": order["_id"], "address": "10 rue Oberkampf", "estimated_delivery": "2026-10-19T12:30:00Z"}
    body.update(extra)
    return client.post("/deliveries/", headers=headers, json=body)


def test_nearest_courier_is_assigned(client, admin, context, order, couriers):
    near, _, _ = couriers
    response = new_delivery(client, admin, order)
    assert response.status_code == 200
    assert response.json()["employee"] == near["_id"]
    assert response.json()["customer"] == order["customer"]
    assert context.orders.find_by_id(order["_id"])["delivery_man"] == near["_id"]


def test_courier_follows_tracker_moves(client, admin, context, order, couriers):
    near, far, _ = couriers
    context.trackers.update_location(far["tracker"], 0.1, 0.0)
    assert find_nearest_courier(context, order["restaurant"])["_id"] == far["_id"]


def test_other_roles_are_never_dispatched(context, hire, order):
    manager, _ = hire("boss@esgiking.fr", "manager")
    context.trackers.create({"employee": manager["_id"], "longitude": 0.0, "latitude": 0.0})
    assert find_nearest_courier(context, order["restaurant"]) is None


def test_delivery_stays_unassigned_without_couriers(client, admin, order):
    response = new_delivery(client, admin, order)
    assert response.status_code == 200
    assert response.json()["employee"] is None
    assert client.post(f"/deliveries/{response.json()['_id']}/assign", headers=admin).status_code == 404


def test_assign_later(client, admin, context, order, hire):
    delivery = new_delivery(client, admin, order).json()
    driver, _ = hire("driver@esgiking.fr", "deliveryman")
    response = client.post(f"/deliveries/{delivery['_id']}/assign", headers=admin)
    assert response.status_code == 200
    assert response.json()["employee"] == driver["_id"]
    assert assign_courier(context, delivery)["employee"] == driver["_id"]


def test_one_delivery_per_order(client, admin, order, couriers):
    assert new_delivery(client, admin, order).status_code == 200
    assert new_delivery(client, admin, order).status_code == 409


def test_unknown_order_is_404(client, admin):
    response = client.post("/deliveries/", headers=admin, json={
        "order": "5f1d7f1d7f1d7f1d7f1d7f1d", "address": "x", "estimated_delivery": "2026-10-19T12:30:00Z",
    })
    assert response.status_code == 404


def test_named_employee_must_be_a_deliveryman(client, admin, order, hire):
    preparer, _ = hire("prep@esgiking.fr", "preparer")
    assert new_delivery(client, admin, order, employee=preparer["_id"]).status_code == 400


def test_named_courier_is_kept(client, admin, order, couriers):
    _, far, _ = couriers
    response = new_delivery(client, admin, order, employee=far["_id"])
    assert response.json()["employee"] == far["_id"]


def test_delivered_stamps_actual_delivery(client, admin, order, couriers):
    _, _, driver = couriers
    delivery = new_delivery(client, admin, order).json()
    url = f"/deliveries/{delivery['_id']}/status"
    assert client.patch(url, headers=driver, json={"status": "delivering"}).json()["actual_delivery"] is None
    delivered = client.patch(url, headers=driver, json={"status": "delivered"}).json()
    assert delivered["actual_delivery"] is not None
    assert client.patch(url, headers=driver, json={"status": "lost"}).status_code == 400


def test_customer_reads_own_delivery(client, admin, login, signup, order, couriers):
    delivery = new_delivery(client, admin, order).json()
    alice = login("alice@example.com", "secret")
    _, bob = signup("bob@example.com")
    assert client.get(f"/deliveries/{delivery['_id']}", headers=alice).status_code == 200
    assert client.get(f"/deliveries/{delivery['_id']}", headers=bob).status_code == 403


def test_reassign_and_reschedule(client, admin, context, order, couriers):
    near, far, _ = couriers
    delivery = new_delivery(client, admin, order).json()
    moved = client.patch(f"/deliveries/{delivery['_id']}/employee", headers=admin, json={"employee_id": far["_id"]})
    assert moved.json()["employee"] == far["_id"]
    assert context.orders.find_by_id(order["_id"])["delivery_man"] == far["_id"]
    later = client.patch(f"/deliveries/{delivery['_id']}/estimated-delivery", headers=admin,
                         json={"estimated_delivery": "2026-10-19T13:00:00Z"})
    assert later.status_code == 200


def test_delete_delivery(client, admin, order):
    delivery = new_delivery(client, admin, order).json()
    assert client.delete(f"/deliveries/{delivery['_id']}", headers=admin).status_code == 204
    assert client.delete(f"/deliveries/{delivery['_id']}", headers=admin).status_code == 404


def test_status_limited_to_assigned_courier_and_own_staff(client, admin, hire, open_restaurant, order, couriers):
    _, _, near_headers = couriers
    delivery = new_delivery(client, admin, order).json()
    _, far_headers = hire("other@esgiking.fr", "deliveryman")
    _, foreign_manager = hire("boss@esgiking.fr", "manager", open_restaurant("Other")["_id"])
    url = f"/deliveries/{delivery['_id']}/status"
    assert client.patch(url, headers=far_headers, json={"status": "delivering"}).status_code == 403
    assert client.patch(url, headers=foreign_manager, json={"status": "canceled"}).status_code == 403
    assert client.patch(url, headers=near_headers, json={"status": "delivering"}).status_code == 200
