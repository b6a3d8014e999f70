from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path("ws/batches/<int:batch_id>/", consumers.BatchProgressConsumer.as_asgi()),
]
