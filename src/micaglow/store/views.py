"""Catalog, cart and individual checkout views."""

import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from micaglow.core.views import form_errors_response, invalid_json_response, read_json
from micaglow.groupbuy.models import Batch, BatchProduct
from micaglow.orders.models import Order
from micaglow.orders.services import (
    LineItem,
    OrderPlacementError,
    build_whatsapp_url,
    create_individual_order,
)

from .cart import (
    AddItem,
    CartItem,
    ClearCart,
    ClearMode,
    PurchaseMode,
    RemoveItem,
    UpdateQuantity,
    get_cart,
)
from .forms import ShippingForm
from .models import Product

logger = logging.getLogger(__name__)


class ProductListView(View):
    """GET /shop/products/?category=Semaglutide"""

    def get(self, request):
        products = Product.objects.filter(is_active=True)
        category = request.GET.get("category")
        if category:
            products = products.filter(category=category)

        try:
            data = [product.as_dict() for product in products]
        except DatabaseError:
            logger.exception("Failed to list products")
            data = []

        return JsonResponse({"products": data})


class ProductDetailView(View):
    """GET /shop/products/<product_id>/"""

    def get(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id, is_active=True)
        return JsonResponse({"product": product.as_dict()})


class CartItemError(Exception):
    pass


def build_cart_item(product_id, mode, batch_id=None) -> CartItem:
    """Price a cart line from the database.

    Individual lines are boxes at the product's box price. Group-buy and
    regional-group lines are vials at the batch price, capped at the vials
    the batch has left.

    Raises:
        CartItemError: Product, mode or batch not valid for the cart
    """
    if mode not in PurchaseMode.values:
        raise CartItemError(f"Invalid mode. Must be one of {', '.join(PurchaseMode.values)}")

    if mode == PurchaseMode.INDIVIDUAL:
        product = Product.objects.filter(pk=product_id, is_active=True).first()
        if product is None:
            raise CartItemError("Product not found")
        return CartItem(
            id=str(product.pk),
            name=product.name,
            price=product.price_per_box,
            quantity=1,
            mode=mode,
            image_url=product.image_url,
        )

    if batch_id is None:
        raise CartItemError("batch_id is required for group orders")

    batch_product = (
        BatchProduct.objects.select_related("batch", "product")
        .filter(batch_id=batch_id, product_id=product_id, product__is_active=True)
        .first()
    )
    if batch_product is None:
        raise CartItemError("Product is not part of this batch")

    batch = batch_product.batch
    if batch.status != Batch.Status.ACTIVE:
        raise CartItemError("This batch is not accepting orders")
    if mode == PurchaseMode.REGIONAL_GROUP and batch.sub_group_id is None:
        raise CartItemError("This batch does not belong to a region")
    if mode == PurchaseMode.GROUP_BUY and batch.kind != Batch.Kind.GROUP_BUY:
        raise CartItemError("This batch is not an open group buy")

    return CartItem(
        id=str(batch_product.product_id),
        name=batch_product.product.name,
        price=batch_product.price_per_vial,
        quantity=1,
        mode=mode,
        batch_id=batch.pk,
        sub_group_id=batch.sub_group_id,
        host_id=batch.host_id,
        max_quantity=batch_product.remaining_vials,
        image_url=batch_product.product.image_url,
    )


def _quantity(data, key="quantity", default=None):
    value = data.get(key, default)
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class CartView(View):
    """GET /shop/cart/"""

    def get(self, request):
        return JsonResponse(get_cart(request).state.as_dict())


class CartAddView(View):
    """Add a product to the cart.

    POST /shop/cart/add/
    {
        "product_id": 3,
        "mode": "regional-group",
        "batch_id": 12,
        "quantity": 2
    }
    """

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        quantity = _quantity(data, default=1)
        if quantity is None or quantity < 1:
            return JsonResponse({"error": "Quantity must be at least 1"}, status=400)

        try:
            item = build_cart_item(
                data.get("product_id"),
                data.get("mode", PurchaseMode.INDIVIDUAL),
                data.get("batch_id"),
            )
        except CartItemError as e:
            return JsonResponse({"error": str(e)}, status=400)
        except (TypeError, ValueError):
            return JsonResponse({"error": "Invalid product or batch id"}, status=400)

        state = get_cart(request).dispatch(AddItem(item, quantity=quantity))
        return JsonResponse(state.as_dict())


class CartRemoveView(View):
    """POST /shop/cart/remove/ {"product_id": 3, "mode": "individual"}"""

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        state = get_cart(request).dispatch(
            RemoveItem(item_id=str(data.get("product_id", "")), mode=data.get("mode", PurchaseMode.INDIVIDUAL))
        )
        return JsonResponse(state.as_dict())


class CartUpdateView(View):
    """Set a line's quantity. Zero or less removes the line.

    POST /shop/cart/update/ {"product_id": 3, "mode": "individual", "quantity": 4}
    """

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        quantity = _quantity(data)
        if quantity is None:
            return JsonResponse({"error": "Quantity must be a whole number"}, status=400)

        state = get_cart(request).dispatch(
            UpdateQuantity(
                item_id=str(data.get("product_id", "")),
                mode=data.get("mode", PurchaseMode.INDIVIDUAL),
                quantity=quantity,
            )
        )
        return JsonResponse(state.as_dict())


class CartClearView(View):
    """Clear the whole cart, or one mode when "mode" is given.

    POST /shop/cart/clear/ {"mode": "group-buy"}
    """

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        mode = data.get("mode")
        if mode and mode not in PurchaseMode.values:
            return JsonResponse({"error": "Invalid mode"}, status=400)

        action = ClearMode(mode) if mode else ClearCart()
        return JsonResponse(get_cart(request).dispatch(action).as_dict())


class CheckoutView(View):
    """Place an individual order from the cart's individual lines.

    Guests may check out; a signed-in customer's order is linked to their profile.

    POST /shop/checkout/
    {
        "customer_name": "Ana Cruz",
        "whatsapp_number": "09171234567",
        "customer_email": "ana@example.com",
        "shipping_address": "12 Mabini St",
        "shipping_city": "Makati",
        "shipping_province": "Metro Manila",
        "shipping_zip_code": "1200"
    }
    """

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        form = ShippingForm(data)
        if not form.is_valid():
            return form_errors_response(form)

        cart = get_cart(request)
        lines = cart.state.for_mode(PurchaseMode.INDIVIDUAL)
        if not lines:
            return JsonResponse({"error": "Your cart has no individual items."}, status=400)

        try:
            confirmation = create_individual_order(
                **form.cleaned_data,
                items=[LineItem(product_id=int(line.id), quantity=line.quantity) for line in lines],
                profile=request.profile_resolver.profile,
            )
        except OrderPlacementError as e:
            logger.warning("Individual checkout failed (%s): %s", e.code, e.message)
            return JsonResponse({"error": e.message, "code": e.code}, status=400)

        cart.dispatch(ClearMode(PurchaseMode.INDIVIDUAL))

        order = Order.objects.prefetch_related("items__product").get(pk=confirmation.order_id)
        return JsonResponse({
            "order": confirmation.as_dict(),
            "whatsapp_url": build_whatsapp_url(settings.STORE_WHATSAPP_NUMBER, order),
        })
