"""Tests for batch status changes, batch pages and progress broadcasts."""

import json
from unittest.mock import MagicMock, patch

import pytest
from django.test import Client
from django.urls import reverse

from micaglow.groupbuy.broadcast import broadcast_batch_progress, broadcast_batch_progress_on_commit
from micaglow.groupbuy.consumers import BatchProgressConsumer
from micaglow.groupbuy.models import Batch
from micaglow.groupbuy.services import BatchTransitionError, transition_batch


@pytest.mark.django_db
class TestTransitionBatch:
    @pytest.mark.parametrize(
        "start, target",
        [
            ("active", "payment_collection"),
            ("active", "cancelled"),
            ("payment_collection", "completed"),
            ("payment_collection", "cancelled"),
        ],
    )
    def test_allowed(self, group_buy_batch, start, target):
        Batch.objects.filter(pk=group_buy_batch.pk).update(status=start)
        group_buy_batch.refresh_from_db()

        transition_batch(group_buy_batch, target)

        group_buy_batch.refresh_from_db()
        assert group_buy_batch.status == target

    @pytest.mark.parametrize(
        "start, target",
        [
            ("active", "completed"),
            ("completed", "active"),
            ("cancelled", "payment_collection"),
            ("payment_collection", "active"),
        ],
    )
    def test_rejected(self, group_buy_batch, start, target):
        Batch.objects.filter(pk=group_buy_batch.pk).update(status=start)
        group_buy_batch.refresh_from_db()

        with pytest.raises(BatchTransitionError):
            transition_batch(group_buy_batch, target)

        group_buy_batch.refresh_from_db()
        assert group_buy_batch.status == start

    def test_unknown_status(self, group_buy_batch):
        with pytest.raises(BatchTransitionError):
            transition_batch(group_buy_batch, "paused")


@pytest.mark.django_db
class TestBatchPages:
    def test_batch_detail_lists_products(self, sub_group_batch):
        response = Client().get(reverse("groupbuy:batch", args=[sub_group_batch.pk]))

        data = response.json()["batch"]
        assert data["sub_group"]["name"] == "Cebu Group"
        assert {p["product"]["name"] for p in data["products"]} == {"Semaglutide", "Tirzepatide"}
        capped = next(p for p in data["products"] if p["product"]["name"] == "Semaglutide")
        assert capped["remaining_vials"] == 50

    def test_sub_group_detail_includes_host_batch(self, sub_group_batch):
        response = Client().get(reverse("groupbuy:sub-group", args=[sub_group_batch.sub_group_id]))

        data = response.json()["sub_group"]
        assert data["host"] == "Bea Santos"
        assert data["active_batch"]["id"] == sub_group_batch.pk


@pytest.mark.django_db
class TestBroadcast:
    def test_sends_progress_to_batch_group(self, sub_group_batch, product):
        layer = MagicMock()
        with patch("micaglow.groupbuy.broadcast.get_channel_layer", return_value=layer), \
                patch("micaglow.groupbuy.broadcast.async_to_sync", side_effect=lambda fn: fn):
            broadcast_batch_progress(sub_group_batch.pk)

        group, payload = layer.group_send.call_args.args
        assert group == f"batch_{sub_group_batch.pk}"
        assert payload["type"] == "batch_progress"
        assert payload["target_vials"] == 100
        assert payload["products"][str(product.pk)] == 0

    def test_failure_is_swallowed(self, sub_group_batch):
        with patch("micaglow.groupbuy.broadcast.get_channel_layer", side_effect=RuntimeError("down")):
            broadcast_batch_progress(sub_group_batch.pk)

    def test_on_commit_defers_send(self, sub_group_batch, django_capture_on_commit_callbacks):
        with patch("micaglow.groupbuy.broadcast.broadcast_batch_progress") as send:
            with django_capture_on_commit_callbacks(execute=False) as callbacks:
                broadcast_batch_progress_on_commit(sub_group_batch.pk)

            send.assert_not_called()
            assert len(callbacks) == 1
            callbacks[0]()

        send.assert_called_once_with(sub_group_batch.pk)


class TestBatchProgressConsumer:
    def test_forwards_progress_event(self):
        consumer = BatchProgressConsumer()
        consumer.send = MagicMock()

        consumer.batch_progress({"type": "batch_progress", "batch_id": 7, "current_vials": 12})

        sent = json.loads(consumer.send.call_args.kwargs["text_data"])
        assert sent == {"type": "batch_progress", "batch_id": 7, "current_vials": 12}

    def test_answers_ping(self):
        consumer = BatchProgressConsumer()
        consumer.send = MagicMock()

        consumer.receive(text_data='{"type": "ping"}')
        consumer.receive(text_data="not json")

        consumer.send.assert_called_once_with(text_data='{"type": "pong"}')
