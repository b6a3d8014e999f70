"""WebSocket consumer for live batch progress."""

import json
import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import WebsocketConsumer

from .broadcast import batch_group_name

logger = logging.getLogger(__name__)


class BatchProgressConsumer(WebsocketConsumer):
    """Read-only feed of vial counts for one batch.

    Route: /ws/batches/<batch_id>/
    """

    def connect(self):
        self.room_group_name = None

        kwargs = self.scope.get("url_route", {}).get("kwargs", {})
        batch_id = kwargs.get("batch_id")
        if batch_id is None:
            logger.warning("Invalid WebSocket route")
            self.close()
            return

        self.batch_id = batch_id
        self.room_group_name = batch_group_name(batch_id)

        try:
            async_to_sync(self.channel_layer.group_add)(
                self.room_group_name,
                self.channel_name
            )
        except Exception as e:
            logger.exception(f"Failed to join channel group: {e}")
            self.close()
            return

        self.accept()
        logger.info(f"WebSocket connected: {self.room_group_name}")

        self.send(text_data=json.dumps({
            "type": "connection_established",
            "batch_id": self.batch_id,
        }))

    def disconnect(self, close_code):
        if self.room_group_name:
            async_to_sync(self.channel_layer.group_discard)(
                self.room_group_name,
                self.channel_name
            )
            logger.info(f"WebSocket disconnected: {self.room_group_name}")

    def receive(self, text_data=None, bytes_data=None):
        # The feed is one-way; only answer keepalive pings
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            return
        if isinstance(data, dict) and data.get("type") == "ping":
            self.send(text_data=json.dumps({"type": "pong"}))

    def batch_progress(self, event):
        """Forward a batch_progress group message to the client."""
        self.send(text_data=json.dumps(event))
