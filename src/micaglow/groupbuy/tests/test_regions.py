"""Tests for the regions endpoint."""

from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.test import Client
from django.urls import reverse

from micaglow.groupbuy.models import Batch, SubGroup
from micaglow.groupbuy.services import list_active_regions


@pytest.mark.django_db
class TestRegionsEndpoint:
    def test_hosted_region_has_active_batch(self, sub_group_batch):
        response = Client().get(reverse("regions"))

        assert response.status_code == 200
        region = response.json()["data"][0]
        assert region["host"]["email"] == "host@example.com"
        assert region["active_batch"] == {
            "id": sub_group_batch.pk,
            "name": "Cebu Batch 1",
            "status": "active",
            "target_vials": 100,
            "current_vials": 0,
        }

    def test_newest_active_or_collecting_batch_wins(self, sub_group, host_profile):
        Batch.objects.create(name="Old", host=host_profile, sub_group=sub_group, status="payment_collection")
        newest = Batch.objects.create(name="New", host=host_profile, sub_group=sub_group)
        Batch.objects.create(name="Done", host=host_profile, sub_group=sub_group, status="completed")

        region = list_active_regions()[0]

        assert region["active_batch"]["id"] == newest.pk

    def test_region_without_open_batch(self, sub_group):
        region = list_active_regions()[0]

        assert region["active_batch"] is None

    def test_unhosted_regions_issue_no_batch_query(self, db, django_assert_num_queries):
        SubGroup.objects.create(name="Davao", region="Mindanao")
        SubGroup.objects.create(name="Iloilo", region="Visayas")

        with django_assert_num_queries(1):
            regions = list_active_regions()

        assert [r["active_batch"] for r in regions] == [None, None]
        assert [r["host"] for r in regions] == [None, None]

    def test_newest_region_first_and_inactive_hidden(self, db):
        SubGroup.objects.create(name="First", region="Luzon")
        SubGroup.objects.create(name="Hidden", region="Luzon", is_active=False)
        SubGroup.objects.create(name="Second", region="Luzon")

        names = [r["name"] for r in Client().get(reverse("regions")).json()["data"]]

        assert names == ["Second", "First"]

    def test_batch_query_failure_degrades_region(self, sub_group_batch):
        with patch("micaglow.groupbuy.services.Batch.objects.filter", side_effect=DatabaseError("boom")):
            response = Client().get(reverse("regions"))

        assert response.status_code == 200
        assert response.json()["data"][0]["active_batch"] is None

    def test_region_query_failure_returns_500(self, db):
        with patch("micaglow.groupbuy.views.list_active_regions", side_effect=DatabaseError("boom")):
            response = Client().get(reverse("regions"))

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch regions"}
