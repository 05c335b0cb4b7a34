def test_restaurant_embeds_its_address(client, open_restaurant):
    restaurant = open_restaurant(longitude=2.37, latitude=48.85)
    assert restaurant["address"]["city"] == "Paris"
    fetched = client.get(f"/restaurants/{restaurant['_id']}").json()
    assert fetched["address"]["longitude"] == 2.37


def test_list_restaurants(client, open_restaurant):
    open_restaurant("B")
    open_restaurant("A")
    assert [r["name"] for r in client.get("/restaurants/").json()] == ["A", "B"]


def test_responsible_joins_the_restaurant(client, admin, context, hire, open_restaurant):
    restaurant = open_restaurant()
    manager, _ = hire("boss@esgiking.fr", "manager")
    response = client.patch(f"/restaurants/{restaurant['_id']}/responsible", headers=admin,
                            json={"employee_id": manager["_id"]})
    assert response.status_code == 200
    assert response.json()["responsible"] == manager["_id"]
    assert context.employees.find_by_id(manager["_id"])["restaurant"] == restaurant["_id"]


def test_moving_an_employee_between_restaurants(client, admin, context, hire, open_restaurant):
    first = open_restaurant("First")
    second = open_restaurant("Second")
    employee, _ = hire("prep@esgiking.fr", "preparer", first["_id"])
    response = client.post(f"/restaurants/{second['_id']}/employees", headers=admin,
                           json={"employee_id": employee["_id"]})
    assert response.status_code == 200
    assert employee["_id"] in response.json()["employees"]
    assert employee["_id"] not in context.restaurants.find_by_id(first["_id"])["employees"]


def test_orders_limited_to_own_restaurant(client, hire, open_restaurant):
    mine = open_restaurant("Mine")
    other = open_restaurant("Other")
    _, preparer = hire("prep@esgiking.fr", "preparer", mine["_id"])
    assert client.get(f"/restaurants/{mine['_id']}/orders", headers=preparer).status_code == 200
    assert client.get(f"/restaurants/{other['_id']}/orders", headers=preparer).status_code == 403


def test_delete_restaurant(client, admin, context, open_restaurant):
    restaurant = open_restaurant()
    assert client.delete(f"/restaurants/{restaurant['_id']}", headers=admin).status_code == 204
    assert context.addresses.count() == 0
    assert client.get(f"/restaurants/{restaurant['_id']}").status_code == 404
    assert client.delete(f"/restaurants/{restaurant['_id']}", headers=admin).status_code == 404


def test_delete_restaurant_detaches_its_employees(client, admin, context, hire, open_restaurant):
    restaurant = open_restaurant()
    employee, _ = hire("prep@esgiking.fr", "preparer", restaurant["_id"])
    assert client.delete(f"/restaurants/{restaurant['_id']}", headers=admin).status_code == 204
    assert "restaurant" not in context.employees.find_by_id(employee["_id"])
