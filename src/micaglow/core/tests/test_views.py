"""Tests for core views and helpers."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import Client, RequestFactory
from django.urls import reverse

from micaglow.core.money import format_peso, round_money
from micaglow.core.views import read_json


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self):
        with patch("micaglow.core.views.storage.check_health", return_value=True):
            response = Client().get(reverse("health_check"))

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected", "storage": "available"}

    def test_storage_down_is_reported_but_healthy(self):
        with patch("micaglow.core.views.storage.check_health", return_value=False):
            response = Client().get(reverse("health_check"))

        assert response.status_code == 200
        assert response.json()["storage"] == "unavailable"

    def test_database_down(self):
        with patch("micaglow.core.views.connection") as connection:
            connection.cursor.side_effect = DatabaseError("down")
            response = Client().get(reverse("health_check"))

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestReadJson:
    @pytest.mark.parametrize(
        "body, expected",
        [
            (b"", {}),
            (b'{"role": "host"}', {"role": "host"}),
            (b"[1, 2]", None),
            (b"{broken", None),
        ],
    )
    def test_decoding(self, body, expected):
        request = RequestFactory().post("/", body, content_type="application/json")

        assert read_json(request) == expected


def test_round_money_is_bankers_rounding():
    assert round_money(Decimal("2.345")) == Decimal("2.34")
    assert round_money(Decimal("2.355")) == Decimal("2.36")


def test_format_peso():
    assert format_peso(Decimal("4657.5")) == "₱4,657.50"
