import pytest

from app import create_app
from models import Expense


@pytest.fixture
def app():
    return create_app({"TESTING": True, "CURRENCY_SYMBOL": "$", "EPSILON": 0.01})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def dinner():
    """A pays 300, split three ways"""
    return Expense(amount=300, paid_by="A", split_between=("A", "B", "C"), description="Dinner")


@pytest.fixture
def group(client):
    response = client.post("/api/groups", json={"name": "Trip", "members": ["A", "B", "C"]})
    assert response.status_code == 201
    return response.get_json()
