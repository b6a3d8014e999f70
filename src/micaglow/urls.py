"""URL configuration for MicaGlow project."""

from django.contrib import admin
from django.urls import include, path

from micaglow.core.views import health_check
from micaglow.groupbuy.views import regions
from micaglow.orders.views import DashboardView

urlpatterns = [
    # Health check
    path("health/", health_check, name="health_check"),

    # Django admin
    path("admin/", admin.site.urls),

    # Authentication
    path("accounts/", include("django.contrib.auth.urls")),

    # User profile
    path("profile/", include("micaglow.profile.urls", namespace="profile")),

    # Admin user management
    path("manage/", include("micaglow.profile.manage_urls", namespace="manage")),

    # Catalog, cart and individual checkout
    path("shop/", include("micaglow.store.urls", namespace="store")),

    # Batches, regions and pooled checkouts
    path("groupbuy/", include("micaglow.groupbuy.urls", namespace="groupbuy")),
    path("api/regions/", regions, name="regions"),

    # Orders
    path("orders/", include("micaglow.orders.urls", namespace="orders")),
    path("dashboard/", DashboardView.as_view(), name="dashboard"),

    # Host portal
    path("host/", include("micaglow.orders.host_urls", namespace="host")),

    # Image uploads
    path("uploads/", include("micaglow.uploads.urls", namespace="uploads")),
]
