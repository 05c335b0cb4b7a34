import math

import mongomock
import pytest
from fastapi.testclient import TestClient

import security
from config import Settings
from context import DomainContext
from database import serialize_doc
from main import create_app, seed_admin
from repositories import TrackerRepository

ADMIN_EMAIL = "root@esgiking.fr"
ADMIN_PASSWORD = "root"

# keep bcrypt cheap under test
security.pwd_context.update(bcrypt__default_rounds=4)


def haversine_km(lon1, lat1, lon2, lat2):
    R = 6371
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)
    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    return R * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class InMemoryTrackerRepository(TrackerRepository):
    """mongomock has no $geoNear; rank trackers in Python instead.

    The real aggregation is exercised in test_geo_mongodb.py against a live server.
    """

    def find_nearest(self, longitude, latitude):
        candidates = []
        for tracker in self.collection.find():
            employee = self.db["employees"].find_one({"_id": tracker["employee"]})
            if not employee or employee.get("role") != "deliveryman":
                continue
            tracker = dict(tracker, employee=employee)
            tracker["distance"] = haversine_km(longitude, latitude, tracker["longitude"], tracker["latitude"])
            candidates.append(tracker)
        if not candidates:
            return None
        return serialize_doc(min(candidates, key=lambda t: t["distance"]))


@pytest.fixture
def settings():
    return Settings(
        database_url="mongodb://localhost:27017",
        database_name="esgiking_test",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def context():
    db = mongomock.MongoClient()["esgiking_test"]
    ctx = DomainContext(db)
    ctx.trackers = InMemoryTrackerRepository(db)
    return ctx


@pytest.fixture
def client(context, settings):
    seed_admin(context, settings)
    return TestClient(create_app(context=context, settings=settings))


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login(client):
    def _login(email, password):
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return bearer(response.json()["session"])
    return _login


@pytest.fixture
def admin(login):
    return login(ADMIN_EMAIL, ADMIN_PASSWORD)


def account_payload(email, password="secret"):
    return {"first_name": "Jane", "last_name": "Doe", "email": email, "password": password}


@pytest.fixture
def signup(client, login):
    """Register a customer; returns (customer, auth headers)."""
    def _signup(email, password="secret"):
        response = client.post("/customers/", json={"user": account_payload(email, password)})
        assert response.status_code == 200, response.text
        return response.json()["customer"], login(email, password)
    return _signup


@pytest.fixture
def hire(client, admin, login):
    """Create an employee; returns (employee, auth headers)."""
    def _hire(email, role, restaurant=None, password="secret"):
        response = client.post("/employees/", headers=admin, json={
            "user": account_payload(email, password),
            "employee": {"role": role, "restaurant": restaurant},
        })
        assert response.status_code == 200, response.text
        return response.json()["employee"], login(email, password)
    return _hire


@pytest.fixture
def open_restaurant(client, admin):
    def _open(name="ESGIKing Bastille", longitude=0.0, latitude=0.0):
        response = client.post("/restaurants/", headers=admin, json={
            "name": name,
            "description": "Burgers",
            "address": {
                "street": "1 rue de la Roquette",
                "city": "Paris",
                "postal_code": "75011",
                "longitude": longitude,
                "latitude": latitude,
            },
        })
        assert response.status_code == 200, response.text
        return response.json()
    return _open


@pytest.fixture
def catalog(client, admin):
    """A category holding one product."""
    category = client.post("/categories/", headers=admin, json={"name": "Burgers"}).json()
    response = client.post("/products/", headers=admin, json={
        "name": "King Burger",
        "price": 8.5,
        "category": category["_id"],
    })
    assert response.status_code == 200, response.text
    return response.json()
