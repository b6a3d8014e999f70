"""WebSocket broadcast of batch progress.

Clients on a batch page join the ``batch_<id>`` group and receive a
``batch_progress`` message whenever an order changes the batch's vial
counts. Broadcasts run after commit and never fail the order that caused
them.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

from .models import Batch

logger = logging.getLogger(__name__)


def batch_group_name(batch_id) -> str:
    return f"batch_{batch_id}"


def broadcast_batch_progress(batch_id):
    """Send the batch's current vial counts to its WebSocket group."""
    try:
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("No channel layer configured, skipping batch progress broadcast")
            return

        batch = Batch.objects.prefetch_related("batch_products").get(pk=batch_id)
        payload = {
            "type": "batch_progress",
            "batch_id": batch.pk,
            "status": batch.status,
            "current_vials": batch.current_vials,
            "target_vials": batch.target_vials,
            "progress_percentage": batch.progress_percentage,
            "products": {
                str(bp.product_id): bp.current_vials for bp in batch.batch_products.all()
            },
            "sent_at": timezone.now().isoformat(),
        }

        async_to_sync(channel_layer.group_send)(batch_group_name(batch_id), payload)
        logger.debug("Broadcast batch progress", extra={"batch_id": batch_id})

    except Exception as e:
        # Never fail the main operation if broadcast fails
        logger.exception(f"Failed to broadcast batch progress: {e}")


def broadcast_batch_progress_on_commit(batch_id):
    """Broadcast after the current transaction commits.

    A rolled-back order must not show up as progress on anyone's screen.
    """
    transaction.on_commit(lambda: broadcast_batch_progress(batch_id))
