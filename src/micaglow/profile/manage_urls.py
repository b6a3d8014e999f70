"""Admin user management URL patterns."""

from django.urls import path

from . import views

app_name = "manage"

urlpatterns = [
    path("users/", views.ManageUsersView.as_view(), name="users"),
    path("users/<int:profile_id>/role/", views.ManageUserRoleView.as_view(), name="user-role"),
]
