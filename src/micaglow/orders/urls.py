"""Order tracking URL patterns."""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("track/", views.TrackOrderView.as_view(), name="track"),
    path("mine/", views.MyOrderCodesView.as_view(), name="mine"),
]
