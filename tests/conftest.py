"""
Shared pytest fixtures: an app on in-memory SQLite, a recording delivery
vendor in place of the simulator, and an authenticated client.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from app import create_app
from config import Config
from extensions import db
from models.customer import Customer
from services.order_service import record_order
from utils import utcnow


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    SCHEDULER_ENABLED = False
    OPENAI_API_KEY = None
    LOG_LEVEL = "WARNING"


class RecordingVendor:
    """Stands in for the delivery simulator; remembers every submission."""

    def __init__(self):
        self.submissions = []
        self.unreachable = set()

    def submit(self, recipient, message, correlation_id):
        if recipient in self.unreachable:
            raise ConnectionError(f"vendor rejected {recipient}")
        self.submissions.append({"to": recipient, "message": message, "log_id": correlation_id})
        return correlation_id


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions["delivery_vendor"] = RecordingVendor()
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def vendor(app):
    return app.extensions["delivery_vendor"]


def _sign_in(client, sub="google-1", email="demo@example.com", name="Demo User"):
    response = client.post("/api/auth/google", json={
        "user": {"email": email, "name": name, "sub": sub}
    })
    assert response.status_code == 200
    return response.get_json()


@pytest.fixture
def auth(client):
    body = _sign_in(client)
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def other_auth(client):
    body = _sign_in(client, sub="google-2", email="other@example.com", name="Other User")
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def make_customer(app):
    """Creates a customer; orders are (amount, days_ago) pairs replayed through record_order."""
    counter = {"n": 0}

    def _make(name=None, segment="regular", orders=(), email=None):
        counter["n"] += 1
        customer = Customer(
            name=name or f"Customer {counter['n']}",
            email=email or f"customer{counter['n']}@example.com",
            segment=segment,
            total_spend=Decimal("0"),
            visit_count=0,
        )
        db.session.add(customer)
        now = utcnow()
        for amount, days_ago in orders:
            record_order(customer, amount, created_at=now - timedelta(days=days_ago), commit=False)
        db.session.commit()
        return customer

    return _make
