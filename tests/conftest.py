"""
Shared pytest fixtures.

The MongoDB collection is replaced by a MagicMock whose motor coroutine methods
are AsyncMocks, so no database is needed. Route tests talk to the FastAPI app
through an httpx AsyncClient over ASGITransport (lifespan events are not sent,
so the app never tries to connect to MongoDB).
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from app.services.location_service import LocationService  # noqa: E402


@pytest.fixture
def location_id():
    return ObjectId()


@pytest.fixture
def location_collection(location_id):
    """A mock motor collection with the calls LocationService makes."""
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=location_id))
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1, modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.aggregate = MagicMock(return_value=cursor)
    return collection


@pytest.fixture
def service(location_collection):
    return LocationService(location_collection)


@pytest.fixture
def location_form():
    """Request fields as a browser form posts them (every value a string)."""
    return {
        "name": "Starcups",
        "address": "125 High Street, Reading, RG6 1PS",
        "facilities": "Hot drinks,Food,Premium wifi",
        "lng": "-0.9690884",
        "lat": "51.455041",
        "days1": "Monday - Friday",
        "opening1": "7:00am",
        "closing1": "7:00pm",
        "closed1": "false",
        "days2": "Saturday",
        "opening2": "8:00am",
        "closing2": "5:00pm",
        "closed2": "false",
    }


@pytest.fixture
def stored_location(location_id):
    """A full document as MongoDB would return it."""
    return {
        "_id": location_id,
        "name": "Starcups",
        "address": "125 High Street, Reading, RG6 1PS",
        "rating": 4.5,
        "facilities": ["Hot drinks", "Food", "Premium wifi"],
        "coords": {"type": "Point", "coordinates": [-0.9690884, 51.455041]},
        "hours": {"days": "Saturday", "opening": "8:00am", "closing": "5:00pm", "closed": False},
        "reviews": [
            {"_id": ObjectId(), "author": "Simon Holmes", "rating": 5, "reviewText": "What a great place."},
        ],
    }


@pytest_asyncio.fixture
async def test_client(service):
    """
    HTTPX AsyncClient wired to the app, with the location service dependency
    overridden to use the mock collection.
    """
    from app.main import app
    from app.routers.locations import get_location_service

    app.dependency_overrides[get_location_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
