"""Tests for profile resolution and role updates."""

from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError

from micaglow.profile.models import Profile, Role
from micaglow.profile.services import Identity, ProfileResolver, resolve_profile, set_role


@pytest.fixture
def identity():
    return Identity(id="ext-123", email="new@example.com", first_name="New", last_name="Person")


@pytest.mark.django_db
class TestResolveProfile:
    def test_first_visit_creates_customer_profile(self, identity):
        profile = resolve_profile(identity)

        assert profile is not None
        assert profile.role == Role.CUSTOMER
        assert profile.external_id == "ext-123"
        assert profile.email == "new@example.com"

    def test_second_visit_reuses_profile(self, identity):
        first = resolve_profile(identity)
        second = resolve_profile(identity)

        assert first.pk == second.pk
        assert Profile.objects.filter(external_id="ext-123").count() == 1

    def test_existing_role_is_kept(self, identity):
        Profile.objects.create(external_id="ext-123", email="new@example.com", role=Role.HOST)

        assert resolve_profile(identity).role == Role.HOST

    def test_lost_creation_race_degrades_to_none(self, identity):
        with patch.object(Profile.objects, "create", side_effect=IntegrityError("duplicate key")):
            assert resolve_profile(identity) is None

    def test_lookup_failure_degrades_to_none(self, identity):
        with patch.object(Profile.objects, "get", side_effect=DatabaseError("connection lost")):
            assert resolve_profile(identity) is None

        assert not Profile.objects.exists()


@pytest.mark.django_db
class TestProfileResolver:
    def test_resolves_signed_in_identity(self, identity):
        resolver = ProfileResolver(identity)
        resolver.resolve()

        assert resolver.loading is False
        assert resolver.profile is not None
        assert resolver.role == Role.CUSTOMER
        assert resolver.is_customer is True
        assert resolver.is_host is False

    def test_signed_out_has_no_profile(self):
        resolver = ProfileResolver(Identity(id="", is_signed_in=False))
        resolver.resolve()

        assert resolver.profile is None
        assert resolver.loading is False
        assert resolver.role == Role.CUSTOMER
        assert not Profile.objects.exists()

    def test_identity_not_loaded_stays_loading(self):
        resolver = ProfileResolver(Identity(id="ext-9", is_loaded=False))
        resolver.resolve()

        assert resolver.loading is True
        assert resolver.profile is None
        assert not Profile.objects.exists()

    def test_update_role_is_visible_immediately(self, identity):
        resolver = ProfileResolver(identity)
        resolver.resolve()

        assert resolver.update_role(Role.HOST) is True
        assert resolver.is_host is True
        assert resolver.is_customer is False
        assert Profile.objects.get(external_id="ext-123").role == Role.HOST

    def test_update_role_rejects_unknown_role(self, identity):
        resolver = ProfileResolver(identity)
        resolver.resolve()

        assert resolver.update_role("superhero") is False
        assert resolver.role == Role.CUSTOMER

    def test_update_role_without_profile_fails(self):
        resolver = ProfileResolver(Identity(id="", is_signed_in=False))
        resolver.resolve()

        assert resolver.update_role(Role.ADMIN) is False

    def test_update_role_write_failure_keeps_old_role(self, identity):
        resolver = ProfileResolver(identity)
        resolver.resolve()

        with patch.object(Profile, "save", side_effect=DatabaseError("read only")):
            assert resolver.update_role(Role.ADMIN) is False

        assert resolver.role == Role.CUSTOMER

    def test_refresh_picks_up_external_change(self, identity):
        resolver = ProfileResolver(identity)
        resolver.resolve()

        Profile.objects.filter(external_id="ext-123").update(role=Role.ADMIN)
        assert resolver.is_admin is False

        resolver.refresh()
        assert resolver.is_admin is True


@pytest.mark.django_db
def test_set_role_rejects_invalid_role(identity):
    profile = resolve_profile(identity)

    with pytest.raises(ValueError):
        set_role(profile, "owner")
