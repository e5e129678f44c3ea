"""Client-side search over the listing collection."""

from typing import Iterable

from prime_estates.models.listing import Flat


def matches(flat: Flat, term: str) -> bool:
    """Case-insensitive substring match on flat number or type."""
    needle = term.lower()
    return needle in flat.flat_no.lower() or needle in flat.type.lower()


def filter_listings(listings: Iterable[Flat], term: str) -> list[Flat]:
    """
    Narrow listings to those whose flat number or type contains `term`.

    Returns a new list in the original order; the input is never modified.
    An empty term returns every listing.
    """
    if not term:
        return list(listings)
    return [flat for flat in listings if matches(flat, term)]
