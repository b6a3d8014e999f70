"""Shared pytest fixtures for micaglow tests."""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from micaglow.groupbuy.models import Batch, BatchProduct, SubGroup
from micaglow.profile.models import Profile, Role
from micaglow.store.models import Product

User = get_user_model()


def _profile_for(user, role):
    return Profile.objects.create(
        external_id=str(user.pk),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=role,
    )


def _client_for(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def customer_user(db):
    """Create a customer identity."""
    return User.objects.create_user(
        email="ana@example.com",
        password="testpass123",
        first_name="Ana",
        last_name="Cruz",
    )


@pytest.fixture
def customer_profile(customer_user):
    """Profile of the customer identity."""
    return _profile_for(customer_user, Role.CUSTOMER)


@pytest.fixture
def customer_client(customer_user, customer_profile):
    """Client signed in as the customer."""
    return _client_for(customer_user)


@pytest.fixture
def host_user(db):
    """Create a host identity."""
    return User.objects.create_user(
        email="host@example.com",
        password="testpass123",
        first_name="Bea",
        last_name="Santos",
    )


@pytest.fixture
def host_profile(host_user):
    """Profile of the host identity."""
    return _profile_for(host_user, Role.HOST)


@pytest.fixture
def host_client(host_user, host_profile):
    """Client signed in as the host."""
    return _client_for(host_user)


@pytest.fixture
def manager_user(db):
    """Create an identity with the admin role (not a Django superuser)."""
    return User.objects.create_user(
        email="manager@example.com",
        password="testpass123",
        first_name="Carla",
        last_name="Reyes",
    )


@pytest.fixture
def manager_profile(manager_user):
    """Admin-role profile."""
    return _profile_for(manager_user, Role.ADMIN)


@pytest.fixture
def manager_client(manager_user, manager_profile):
    """Client signed in with the admin role."""
    return _client_for(manager_user)


@pytest.fixture
def product(db):
    """Create a product."""
    return Product.objects.create(
        name="Semaglutide",
        description="2 mg/vial, 10 vials/kit",
        category="Semaglutide",
        price_per_vial=Decimal("465.75"),
        price_per_box=Decimal("4657.50"),
        specifications={"concentration": "2mg", "vials_per_kit": 10},
    )


@pytest.fixture
def second_product(db):
    """Create a second product."""
    return Product.objects.create(
        name="Tirzepatide",
        description="5 mg/vial, 10 vials/kit",
        category="Tirzepatide",
        price_per_vial=Decimal("488.75"),
        price_per_box=Decimal("4887.50"),
    )


@pytest.fixture
def sub_group(host_profile):
    """Create a region hosted by the host."""
    return SubGroup.objects.create(
        name="Cebu Group",
        region="Visayas",
        city="Cebu City",
        host=host_profile,
        whatsapp_number="639171112222",
    )


@pytest.fixture
def sub_group_batch(sub_group, host_profile, product, second_product):
    """Active sub-group batch.

    product is capped at 50 vials; second_product has no per-product cap.
    """
    batch = Batch.objects.create(
        name="Cebu Batch 1",
        kind=Batch.Kind.SUB_GROUP,
        target_vials=100,
        host=host_profile,
        sub_group=sub_group,
    )
    BatchProduct.objects.create(
        batch=batch, product=product, target_vials=50, price_per_vial=Decimal("450.00")
    )
    BatchProduct.objects.create(
        batch=batch, product=second_product, price_per_vial=Decimal("480.00")
    )
    return batch


@pytest.fixture
def group_buy_batch(db, product):
    """Active admin-run group-buy batch with one product."""
    batch = Batch.objects.create(
        name="January Group Buy",
        kind=Batch.Kind.GROUP_BUY,
        target_vials=500,
    )
    BatchProduct.objects.create(batch=batch, product=product, price_per_vial=Decimal("440.00"))
    return batch
