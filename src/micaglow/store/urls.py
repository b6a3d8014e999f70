"""Store URL patterns."""

from django.urls import path

from . import views

app_name = "store"

urlpatterns = [
    path("products/", views.ProductListView.as_view(), name="products"),
    path("products/<int:product_id>/", views.ProductDetailView.as_view(), name="product"),
    path("cart/", views.CartView.as_view(), name="cart"),
    path("cart/add/", views.CartAddView.as_view(), name="cart-add"),
    path("cart/remove/", views.CartRemoveView.as_view(), name="cart-remove"),
    path("cart/update/", views.CartUpdateView.as_view(), name="cart-update"),
    path("cart/clear/", views.CartClearView.as_view(), name="cart-clear"),
    path("checkout/", views.CheckoutView.as_view(), name="checkout"),
]
