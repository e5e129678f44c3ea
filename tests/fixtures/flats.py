"""Flat listing wire payload fixtures."""

from typing import Dict, Any


def flat_payload_mongo(listing_id: str = "1", flat_no: str = "A-101") -> Dict[str, Any]:
    """Listing as returned by a Mongo-backed API (`_id`)."""
    return {
        "_id": listing_id,
        "flatNo": flat_no,
        "type": "2BHK",
        "price": 150000,
        "status": "Available",
        "image": "",
        "__v": 0
    }


def flat_payload_plain_id(listing_id: str = "2", flat_no: str = "B-204") -> Dict[str, Any]:
    """Listing using the plain `id` alias and a string price."""
    return {
        "id": listing_id,
        "flatNo": flat_no,
        "type": "3BHK Apartment",
        "price": "245000",
        "status": "Sold",
        "image": "https://example.com/b204.jpg"
    }


def flat_form_input() -> Dict[str, Any]:
    """Raw form submission: every value is text."""
    return {
        "flatNo": "C-12",
        "type": "Studio",
        "price": "89000",
        "status": "Available",
        "image": ""
    }
