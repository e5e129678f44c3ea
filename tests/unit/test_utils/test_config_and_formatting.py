"""Tests for configuration and display helpers."""

import pytest

from prime_estates.models.listing import FlatStatus
from prime_estates.services.demo_seed import DEMO_ID_PREFIX, demo_flats
from prime_estates.utils.config import ApiConfig
from prime_estates.utils.formatting import format_price, status_action_label


@pytest.mark.unit
@pytest.mark.parametrize("base_url,expected", [
    ("http://localhost:5000/api", "http://localhost:5000/api/flats"),
    ("https://prime-estates-api.onrender.com/api/", "https://prime-estates-api.onrender.com/api/flats"),
])
def test_flats_url(base_url, expected):
    assert ApiConfig.flats_url(base_url) == expected


@pytest.mark.unit
def test_flats_url_defaults_to_environment():
    """Test the default comes from FLATS_API_BASE_URL (set in conftest)."""
    assert ApiConfig.flats_url() == f"{ApiConfig.BASE_URL.rstrip('/')}/flats"
    assert ApiConfig.TIMEOUT_SECONDS > 0


@pytest.mark.unit
@pytest.mark.parametrize("price,expected", [
    (150000, "$150,000"),
    (150000.0, "$150,000"),
    (1234.5, "$1,234.50"),
    (0, "$0"),
])
def test_format_price(price, expected):
    assert format_price(price) == expected


@pytest.mark.unit
def test_status_action_label():
    assert status_action_label(FlatStatus.AVAILABLE) == "Mark Sold"
    assert status_action_label(FlatStatus.SOLD) == "Available"


@pytest.mark.unit
def test_demo_flats_are_fresh_copies():
    """Test each call returns a new list of non-durable listings."""
    first, second = demo_flats(), demo_flats()

    assert first == second
    assert first is not second
    assert all(flat.listing_id.startswith(DEMO_ID_PREFIX) for flat in first)
    assert {flat.status for flat in first} == {FlatStatus.AVAILABLE, FlatStatus.SOLD}
