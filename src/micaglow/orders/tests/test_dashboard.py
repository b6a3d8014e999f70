"""Tests for the customer dashboard and order tracking."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import Client
from django.urls import reverse

from micaglow.orders.dashboard import get_dashboard, get_order_history, summarize_orders
from micaglow.orders.models import Order, OrderItem


def make_order(profile, code, total, payment_status="pending", batch=None, product=None, kind="individual"):
    order = Order.objects.create(
        order_code=code,
        kind=kind,
        profile=profile,
        customer_name="Ana Cruz",
        whatsapp_number="09171234567",
        batch=batch,
        subtotal=Decimal(total),
        total_amount=Decimal(total),
        payment_status=payment_status,
    )
    if product is not None:
        OrderItem.objects.create(
            order=order, product=product, quantity=1, unit_price=Decimal(total), total_price=Decimal(total)
        )
    return order


@pytest.mark.django_db
class TestSummary:
    def test_only_paid_orders_count_toward_spend(self, customer_profile):
        make_order(customer_profile, "MG-1", "100", "paid")
        make_order(customer_profile, "MG-2", "50", "pending")
        make_order(customer_profile, "MG-3", "25", "paid")

        summary = summarize_orders(get_order_history(customer_profile))

        assert summary.total_orders == 3
        assert summary.total_spent == Decimal("125.00")

    def test_history_newest_first_and_own_only(self, customer_profile, host_profile):
        make_order(customer_profile, "MG-OLD", "10")
        make_order(host_profile, "MG-OTHER", "10")
        make_order(customer_profile, "MG-NEW", "10")

        codes = [order.order_code for order in get_order_history(customer_profile)]

        assert codes == ["MG-NEW", "MG-OLD"]

    def test_read_failure_gives_empty_dashboard(self, customer_profile):
        make_order(customer_profile, "MG-1", "100", "paid")

        with patch("micaglow.orders.dashboard.get_order_history", side_effect=DatabaseError("boom")):
            dashboard = get_dashboard(customer_profile)

        assert dashboard == {"orders": [], "summary": {"total_orders": 0, "total_spent": Decimal("0.00")}}

    def test_no_profile(self):
        assert get_dashboard(None)["orders"] == []


@pytest.mark.django_db
class TestDashboardView:
    def test_requires_sign_in(self):
        response = Client().get(reverse("dashboard"))

        assert response.status_code == 401

    def test_shows_orders_with_items_and_batch(self, customer_client, customer_profile, product, group_buy_batch):
        make_order(customer_profile, "MG-1", "440", "paid", batch=group_buy_batch, product=product, kind="group_buy")

        response = customer_client.get(reverse("dashboard"))

        data = response.json()
        assert data["summary"] == {"total_orders": 1, "total_spent": "440.00"}
        order = data["orders"][0]
        assert order["batch"] == {"id": group_buy_batch.pk, "name": "January Group Buy", "status": "active"}
        assert order["items"][0]["product_name"] == "Semaglutide"


@pytest.mark.django_db
class TestTracking:
    def test_track_by_code(self, customer_profile):
        make_order(customer_profile, "MG-20260115-ABC123", "100")

        response = Client().get(reverse("orders:track"), {"code": "mg-20260115-abc123"})

        assert response.status_code == 200
        assert response.json()["order"]["order_code"] == "MG-20260115-ABC123"
        assert response.json()["batch_orders"] == []

    def test_group_buy_lists_same_customer_batch_orders(self, customer_profile, group_buy_batch, product):
        first = make_order(customer_profile, "MG-A", "440", batch=group_buy_batch, product=product, kind="group_buy")
        make_order(customer_profile, "MG-B", "440", batch=group_buy_batch, product=product, kind="group_buy")

        response = Client().get(reverse("orders:track"), {"code": "MG-B"})

        assert [o["order_code"] for o in response.json()["batch_orders"]] == [first.order_code]

    def test_unknown_code(self, db):
        response = Client().get(reverse("orders:track"), {"code": "MG-NOPE"})

        assert response.status_code == 404

    def test_blank_code(self, db):
        response = Client().get(reverse("orders:track"))

        assert response.status_code == 400

    def test_my_order_codes_newest_first(self, customer_client, customer_profile):
        make_order(customer_profile, "MG-1", "10")
        make_order(customer_profile, "MG-2", "10")

        response = customer_client.get(reverse("orders:mine"))

        assert response.json() == {"order_codes": ["MG-2", "MG-1"]}
