"""Shared pytest fixtures and configuration."""

import os
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, Mock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("FLATS_API_BASE_URL", "http://testserver/api")
os.environ.setdefault("FLATS_API_TIMEOUT_SECONDS", "2")
os.environ.setdefault("LOG_FORMAT", "text")

from prime_estates.models.listing import Flat, FlatStatus
from prime_estates.services.listing_store import ListingStore
from prime_estates.services.remote_client import RemoteClient
from tests.utils.helpers import FakeFlatsBackend, TEST_BASE_URL


@pytest.fixture
def sample_flats():
    """Three listings, the first matching the A-101 search scenario."""
    return [
        Flat(listing_id="1", flat_no="A-101", type="2BHK", price=150000, status=FlatStatus.AVAILABLE),
        Flat(listing_id="2", flat_no="B-204", type="3BHK Apartment", price=245000, status=FlatStatus.SOLD),
        Flat(listing_id="3", flat_no="C-12", type="Studio", price=89000, status=FlatStatus.AVAILABLE),
    ]


@pytest.fixture
def sample_flat_payloads(sample_flats):
    """The sample listings in wire format (`_id` alias)."""
    payloads = []
    for flat in sample_flats:
        payload = flat.to_payload()
        payload["_id"] = flat.listing_id
        payloads.append(payload)
    return payloads


@pytest.fixture
def fake_backend(sample_flat_payloads):
    """In-memory flats API seeded with the sample listings."""
    return FakeFlatsBackend(sample_flat_payloads)


@pytest_asyncio.fixture
async def remote_client(fake_backend):
    """RemoteClient wired to the fake backend."""
    client = RemoteClient(base_url=TEST_BASE_URL, timeout=2, transport=fake_backend.transport())
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(remote_client):
    """Connected store over the fake backend."""
    return ListingStore(remote_client)


@pytest.fixture
def mock_remote_client():
    """Mock RemoteClient for store tests that must observe transport calls."""
    client = Mock(spec=RemoteClient)
    client.flats_url = f"{TEST_BASE_URL}/flats"
    client.list = AsyncMock(return_value=[])
    client.create = AsyncMock()
    client.update = AsyncMock()
    client.remove = AsyncMock(return_value=None)
    return client


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2026-03-02 09:30:00") as frozen_time:
        yield frozen_time
