"""Host dashboard URL patterns."""

from django.urls import path

from . import views

app_name = "host"

urlpatterns = [
    path("batches/", views.HostBatchListView.as_view(), name="batches"),
    path("batches/<int:batch_id>/orders/", views.HostBatchOrdersView.as_view(), name="batch-orders"),
    path("batches/<int:batch_id>/status/", views.HostBatchStatusView.as_view(), name="batch-status"),
    path("orders/<int:order_id>/status/", views.HostOrderStatusView.as_view(), name="order-status"),
]
