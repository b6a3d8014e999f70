"""Money helpers shared by the cart and order placement."""

from decimal import ROUND_HALF_EVEN, Decimal


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places using banker's rounding."""
    quantize_str = "0." + "0" * places
    return Decimal(amount).quantize(Decimal(quantize_str), rounding=ROUND_HALF_EVEN)


def format_peso(amount: Decimal) -> str:
    """Render an amount the way customers see it in chat messages."""
    return f"₱{round_money(amount):,}"
