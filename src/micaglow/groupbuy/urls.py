"""Group-buy URL patterns."""

from django.urls import path

from . import views

app_name = "groupbuy"

urlpatterns = [
    path("batches/<int:batch_id>/", views.BatchDetailView.as_view(), name="batch"),
    path("sub-groups/<int:sub_group_id>/", views.SubGroupDetailView.as_view(), name="sub-group"),
    path("checkout/sub-group/", views.SubGroupCheckoutView.as_view(), name="checkout-sub-group"),
    path("checkout/group-buy/", views.GroupBuyCheckoutView.as_view(), name="checkout-group-buy"),
]
