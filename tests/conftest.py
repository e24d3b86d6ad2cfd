"""
Pytest configuration and shared fixtures for the order backend tests.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app  # noqa: E402
from config import Settings  # noqa: E402
from store import OrderStore  # noqa: E402


@pytest.fixture
def store():
    """Fresh, empty store starting at order 1000."""
    return OrderStore()


@pytest.fixture
def client(store):
    app = create_app(store=store, settings=Settings())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_order():
    """A valid order submission as the storefront sends it."""
    return {
        "customerInfo": {
            "name": "A. Student",
            "email": "a.student@example.edu",
            "phone": "408-555-0100",
            "specialRequests": "Extra salsa",
        },
        "items": [
            {"name": "Taco", "price": 4.75, "qty": 2, "itemTotal": 9.5},
        ],
        "total": 9.5,
    }


@pytest.fixture
def multi_item_order():
    return {
        "customerInfo": {
            "name": "Sammy Spartan",
            "email": "sammy@example.edu",
            "phone": "408-555-0199",
        },
        "items": [
            {"name": "Burrito", "price": 8.0, "qty": 1, "itemTotal": 8.0},
            {"name": "Horchata", "price": 3.25, "qty": 3, "itemTotal": 9.75},
            {"name": "Churro", "price": 2.5, "qty": 2, "itemTotal": 5.0},
        ],
        "total": 22.75,
    }
