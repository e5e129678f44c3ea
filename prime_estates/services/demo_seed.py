"""Sample listings for demo mode when the backend cannot be reached."""

from prime_estates.models.listing import Flat, FlatStatus


DEMO_ID_PREFIX = "demo-"


def demo_flats() -> list[Flat]:
    """Return a fresh list of sample flats with non-durable identities."""
    return [
        Flat(
            listing_id=f"{DEMO_ID_PREFIX}1",
            flat_no="A-101",
            type="2BHK Apartment",
            price=150000,
            status=FlatStatus.AVAILABLE,
            image="https://images.unsplash.com/photo-1560518883-ce09059eeffa?q=80&w=600&h=400&auto=format&fit=crop",
        ),
        Flat(
            listing_id=f"{DEMO_ID_PREFIX}2",
            flat_no="B-204",
            type="3BHK Apartment",
            price=245000,
            status=FlatStatus.SOLD,
        ),
        Flat(
            listing_id=f"{DEMO_ID_PREFIX}3",
            flat_no="C-12",
            type="Studio",
            price=89000,
            status=FlatStatus.AVAILABLE,
        ),
    ]
