"""Tests for the sub-group and group-buy checkout endpoints."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.urls import reverse

from micaglow.groupbuy.models import Batch, BatchProduct
from micaglow.orders.models import Order
from micaglow.store.cart import CART_SESSION_KEY, CartItem, PurchaseMode

CUSTOMER = {"customer_name": "Ana Cruz", "whatsapp_number": "09171234567"}


def post_json(client, name, data):
    return client.post(reverse(name), data, content_type="application/json")


def cart(client):
    return client.get(reverse("store:cart")).json()


@pytest.fixture
def filled_cart(customer_client, product, sub_group_batch, group_buy_batch):
    """Customer cart with one line in every mode."""
    post_json(customer_client, "store:cart-add", {"product_id": product.pk})
    post_json(customer_client, "store:cart-add", {
        "product_id": product.pk, "mode": "group-buy", "batch_id": group_buy_batch.pk, "quantity": 2,
    })
    post_json(customer_client, "store:cart-add", {
        "product_id": product.pk, "mode": "regional-group", "batch_id": sub_group_batch.pk, "quantity": 3,
    })
    return customer_client


@pytest.mark.django_db
class TestSubGroupCheckout:
    def test_places_order_and_clears_only_regional_lines(self, filled_cart, sub_group_batch, customer_profile):
        response = post_json(filled_cart, "groupbuy:checkout-sub-group", CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["total_vials"] == 3
        assert data["whatsapp_url"].startswith("https://wa.me/639171112222?text=")

        order = Order.objects.get(order_code=data["order"]["order_code"])
        assert order.kind == Order.Kind.SUB_GROUP
        assert order.profile == customer_profile
        assert order.sub_group_id == sub_group_batch.sub_group_id

        sub_group_batch.refresh_from_db()
        assert sub_group_batch.current_vials == 3

        modes = sorted(item["mode"] for item in cart(filled_cart)["items"])
        assert modes == ["group-buy", "individual"]

    def test_failure_returns_message_and_keeps_cart(self, filled_cart, sub_group_batch):
        Batch.objects.filter(pk=sub_group_batch.pk).update(status=Batch.Status.PAYMENT_COLLECTION)

        response = post_json(filled_cart, "groupbuy:checkout-sub-group", CUSTOMER)

        assert response.status_code == 400
        assert response.json()["error"] == "Batch Cebu Batch 1 is not accepting orders."
        assert response.json()["code"] == "batch_not_active"
        assert len(cart(filled_cart)["items"]) == 3
        assert not Order.objects.exists()

    def test_invalid_details_make_no_call(self, filled_cart):
        with patch("micaglow.groupbuy.views.create_subgroup_order") as place:
            response = post_json(filled_cart, "groupbuy:checkout-sub-group", {"customer_name": "  "})

        assert response.status_code == 400
        place.assert_not_called()

    def test_guest_checkout(self, client, product, sub_group_batch):
        post_json(client, "store:cart-add", {
            "product_id": product.pk, "mode": "regional-group", "batch_id": sub_group_batch.pk, "quantity": 2,
        })

        response = post_json(client, "groupbuy:checkout-sub-group", CUSTOMER)

        assert response.status_code == 200
        order = Order.objects.get(order_code=response.json()["order"]["order_code"])
        assert order.profile is None
        assert order.customer_name == "Ana Cruz"
        sub_group_batch.refresh_from_db()
        assert sub_group_batch.current_vials == 2

    def test_lines_from_several_batches_are_refused(self, client, product, second_product, sub_group_batch):
        session = client.session
        session[CART_SESSION_KEY] = [
            CartItem(
                id=str(product.pk), name="Semaglutide", price=Decimal("450.00"), quantity=1,
                mode=PurchaseMode.REGIONAL_GROUP, batch_id=sub_group_batch.pk,
                sub_group_id=sub_group_batch.sub_group_id,
            ).to_dict(),
            CartItem(
                id=str(second_product.pk), name="Tirzepatide", price=Decimal("300.00"), quantity=1,
                mode=PurchaseMode.REGIONAL_GROUP, batch_id=sub_group_batch.pk + 1,
                sub_group_id=sub_group_batch.sub_group_id,
            ).to_dict(),
        ]
        session.save()

        response = post_json(client, "groupbuy:checkout-sub-group", CUSTOMER)

        assert response.status_code == 400
        assert not Order.objects.exists()
        assert len(cart(client)["items"]) == 2

    def test_second_batch_in_region_orders_into_its_own_batch(
        self, customer_client, product, second_product, sub_group_batch, host_profile
    ):
        second_batch = Batch.objects.create(
            name="Cebu Batch 2",
            kind=Batch.Kind.SUB_GROUP,
            target_vials=100,
            host=host_profile,
            sub_group=sub_group_batch.sub_group,
        )
        BatchProduct.objects.create(
            batch=second_batch, product=second_product, price_per_vial=Decimal("300.00")
        )
        post_json(customer_client, "store:cart-add", {
            "product_id": product.pk, "mode": "regional-group", "batch_id": sub_group_batch.pk,
        })
        post_json(customer_client, "store:cart-add", {
            "product_id": second_product.pk, "mode": "regional-group", "batch_id": second_batch.pk,
        })

        response = post_json(customer_client, "groupbuy:checkout-sub-group", CUSTOMER)

        assert response.status_code == 200
        order = Order.objects.get(order_code=response.json()["order"]["order_code"])
        assert order.batch == second_batch
        assert [(item.product_id, item.unit_price) for item in order.items.all()] == [
            (second_product.pk, Decimal("300.00")),
        ]
        sub_group_batch.refresh_from_db()
        second_batch.refresh_from_db()
        assert sub_group_batch.current_vials == 0
        assert second_batch.current_vials == 1


@pytest.mark.django_db
class TestGroupBuyCheckout:
    def test_places_order_and_clears_only_group_buy_lines(self, filled_cart, group_buy_batch):
        response = post_json(filled_cart, "groupbuy:checkout-group-buy", CUSTOMER)

        assert response.status_code == 200
        assert response.json()["whatsapp_url"].startswith("https://wa.me/639154901224?text=")

        group_buy_batch.refresh_from_db()
        assert group_buy_batch.current_vials == 2

        modes = sorted(item["mode"] for item in cart(filled_cart)["items"])
        assert modes == ["individual", "regional-group"]

    def test_empty_namespace(self, customer_client):
        response = post_json(customer_client, "groupbuy:checkout-group-buy", CUSTOMER)

        assert response.status_code == 400
