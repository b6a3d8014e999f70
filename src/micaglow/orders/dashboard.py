"""Customer dashboard reads.

Reads degrade instead of failing: a database error gives an empty
dashboard, logged, never a 500.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError

from micaglow.core.money import round_money

from .models import Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int = 0
    total_spent: Decimal = Decimal("0.00")

    def as_dict(self):
        return {"total_orders": self.total_orders, "total_spent": self.total_spent}


def get_order_history(profile):
    """The profile's orders, newest first, with items and batch loaded."""
    return list(
        Order.objects.filter(profile=profile)
        .select_related("batch")
        .prefetch_related("items__product")
        .order_by("-created_at", "-pk")
    )


def summarize_orders(orders) -> OrderSummary:
    """Count every order; only paid orders count toward money spent."""
    spent = sum(
        (order.total_amount for order in orders if order.payment_status == Order.PaymentStatus.PAID),
        Decimal("0"),
    )
    return OrderSummary(total_orders=len(orders), total_spent=round_money(spent))


def get_dashboard(profile):
    if profile is None:
        return {"orders": [], "summary": OrderSummary().as_dict()}

    try:
        orders = get_order_history(profile)
    except DatabaseError:
        logger.exception("Failed to load order history for profile %s", profile.pk)
        orders = []

    return {
        "orders": [order.as_dict() for order in orders],
        "summary": summarize_orders(orders).as_dict(),
    }
