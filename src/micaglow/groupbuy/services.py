"""Batch lookups, region listing and batch status changes."""

import logging

from django.db import DatabaseError, transaction

from .models import Batch, SubGroup

logger = logging.getLogger(__name__)

# Statuses in which a batch is still a host's "current" batch
ACTIVE_BATCH_STATUSES = (Batch.Status.ACTIVE, Batch.Status.PAYMENT_COLLECTION)

# Allowed batch status changes; completed and cancelled are final
BATCH_TRANSITIONS = {
    Batch.Status.ACTIVE: (Batch.Status.PAYMENT_COLLECTION, Batch.Status.CANCELLED),
    Batch.Status.PAYMENT_COLLECTION: (Batch.Status.COMPLETED, Batch.Status.CANCELLED),
}


class BatchTransitionError(Exception):
    """Raised when a batch cannot move to the requested status."""


def get_host_active_batch(host_id) -> Batch | None:
    """Newest active or payment-collection batch run by the host.

    A query failure is logged and reads as "no active batch".
    """
    try:
        return (
            Batch.objects.filter(host_id=host_id, status__in=ACTIVE_BATCH_STATUSES)
            .order_by("-created_at", "-pk")
            .first()
        )
    except DatabaseError:
        logger.exception("Active batch lookup failed for host %s", host_id)
        return None


def _host_summary(profile):
    return {
        "id": profile.pk,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "email": profile.email,
    }


def _batch_summary(batch):
    return {
        "id": batch.pk,
        "name": batch.name,
        "status": batch.status,
        "target_vials": batch.target_vials,
        "current_vials": batch.current_vials,
    }


def list_active_regions():
    """Active sub-groups, newest first, each with its host's current batch.

    Regions without a host get ``active_batch: None`` without touching the
    batch table.

    Raises:
        DatabaseError: If the sub-group query itself fails
    """
    sub_groups = list(
        SubGroup.objects.filter(is_active=True).select_related("host").order_by("-created_at", "-pk")
    )

    regions = []
    for sub_group in sub_groups:
        region = sub_group.as_dict()
        region["host_id"] = sub_group.host_id
        region["created_at"] = sub_group.created_at.isoformat()

        if sub_group.host_id is None:
            region["host"] = None
            region["active_batch"] = None
        else:
            region["host"] = _host_summary(sub_group.host)
            batch = get_host_active_batch(sub_group.host_id)
            region["active_batch"] = _batch_summary(batch) if batch else None

        regions.append(region)

    return regions


def can_transition(batch: Batch, status: str) -> bool:
    return status in BATCH_TRANSITIONS.get(batch.status, ())


@transaction.atomic
def transition_batch(batch: Batch, status: str) -> Batch:
    """Move a batch to a new status.

    Args:
        batch: The batch to change
        status: Target status

    Returns:
        The updated batch

    Raises:
        BatchTransitionError: If the status is unknown or the change is not allowed
    """
    if status not in Batch.Status.values:
        raise BatchTransitionError(f"Unknown batch status: {status}")

    # Re-read under lock so a concurrent change is not overwritten
    locked = Batch.objects.select_for_update().get(pk=batch.pk)
    if not can_transition(locked, status):
        raise BatchTransitionError(
            f"Cannot change batch status from {locked.status} to {status}"
        )

    previous = locked.status
    locked.status = status
    locked.save(update_fields=["status", "updated_at"])

    batch.status = locked.status
    batch.updated_at = locked.updated_at

    logger.info("Batch %s status changed from %s to %s", batch.pk, previous, status)
    return batch


def batch_detail(batch: Batch):
    """Batch with its products for the batch page."""
    data = batch.as_dict()
    data["products"] = [
        batch_product.as_dict()
        for batch_product in batch.batch_products.select_related("product")
    ]
    data["sub_group"] = batch.sub_group.as_dict() if batch.sub_group else None
    return data
