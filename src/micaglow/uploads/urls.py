"""Upload URL patterns."""

from django.urls import path

from . import views

app_name = "uploads"

urlpatterns = [
    path("images/", views.ImageUploadView.as_view(), name="image"),
]
