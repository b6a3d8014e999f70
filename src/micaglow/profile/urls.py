"""Profile URL patterns."""

from django.urls import path

from . import views

app_name = "profile"

urlpatterns = [
    path("", views.ProfileView.as_view(), name="view"),
    path("refresh/", views.ProfileRefreshView.as_view(), name="refresh"),
]
