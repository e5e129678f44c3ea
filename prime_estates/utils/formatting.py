"""Display helpers for listing cards."""

from prime_estates.models.listing import FlatStatus


def format_price(price: float, currency_symbol: str = "$") -> str:
    """Format a price with thousands grouping, dropping .00 on whole amounts."""
    if float(price).is_integer():
        return f"{currency_symbol}{int(price):,}"
    return f"{currency_symbol}{price:,.2f}"


def status_action_label(status: FlatStatus) -> str:
    """Label for the card button that toggles the status."""
    return "Mark Sold" if status is FlatStatus.AVAILABLE else "Available"
