"""Regions, batch pages and pooled checkouts."""

import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from micaglow.core.views import form_errors_response, invalid_json_response, read_json
from micaglow.orders.models import Order
from micaglow.orders.services import (
    LineItem,
    OrderPlacementError,
    build_whatsapp_url,
    create_group_buy_order,
    create_subgroup_order,
)
from micaglow.store.cart import ClearMode, PurchaseMode, get_cart
from micaglow.store.forms import CustomerInfoForm

from .models import Batch, SubGroup
from .services import batch_detail, get_host_active_batch, list_active_regions

logger = logging.getLogger(__name__)


def regions(request):
    """Active regions with each host's current batch.

    GET /api/regions/
    """
    try:
        data = list_active_regions()
    except DatabaseError:
        logger.exception("Failed to fetch regions")
        return JsonResponse({"error": "Failed to fetch regions"}, status=500)

    return JsonResponse({"data": data})


class BatchDetailView(View):
    """GET /groupbuy/batches/<batch_id>/"""

    def get(self, request, batch_id):
        batch = get_object_or_404(Batch.objects.select_related("sub_group"), pk=batch_id)
        return JsonResponse({"batch": batch_detail(batch)})


class SubGroupDetailView(View):
    """A region with its host's current batch and that batch's products.

    GET /groupbuy/sub-groups/<sub_group_id>/
    """

    def get(self, request, sub_group_id):
        sub_group = get_object_or_404(SubGroup.objects.select_related("host"), pk=sub_group_id, is_active=True)
        batch = get_host_active_batch(sub_group.host_id) if sub_group.host_id else None

        data = sub_group.as_dict()
        data["host"] = sub_group.host.display_name if sub_group.host else None
        data["active_batch"] = batch_detail(batch) if batch else None
        return JsonResponse({"sub_group": data})


class PooledCheckoutView(View):
    """Shared flow for checkouts that pool into a batch.

    Open to guests; a signed-in customer's order is linked to their profile.
    Validates the customer details, places the order from this mode's cart
    lines and clears only this mode's lines, and only on success.
    """

    mode = None

    def place_order(self, form, lines, profile):
        raise NotImplementedError

    def contact_number(self, batch):
        raise NotImplementedError

    def post(self, request):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        form = CustomerInfoForm(data)
        if not form.is_valid():
            return form_errors_response(form)

        cart = get_cart(request)
        lines = cart.state.for_mode(self.mode)
        if not lines:
            return JsonResponse({"error": "Your cart has no items for this checkout."}, status=400)
        if len({line.batch_id for line in lines}) > 1:
            return JsonResponse(
                {"error": "Your cart mixes items from different batches. Remove items from all but one batch."},
                status=400,
            )

        try:
            confirmation = self.place_order(form, lines, request.profile_resolver.profile)
        except OrderPlacementError as e:
            logger.warning("Checkout failed (%s): %s", e.code, e.message)
            return JsonResponse({"error": e.message, "code": e.code}, status=400)

        cart.dispatch(ClearMode(self.mode))

        order = Order.objects.select_related("batch__sub_group").prefetch_related("items__product").get(
            pk=confirmation.order_id
        )
        return JsonResponse({
            "order": confirmation.as_dict(),
            "whatsapp_url": build_whatsapp_url(
                self.contact_number(order.batch),
                order,
                heading=f'Hi! I\'d like to place an order for "{order.batch.name}".',
            ),
        })


class SubGroupCheckoutView(PooledCheckoutView):
    """POST /groupbuy/checkout/sub-group/
    {
        "customer_name": "Ana Cruz",
        "whatsapp_number": "09171234567"
    }
    """

    mode = PurchaseMode.REGIONAL_GROUP

    def place_order(self, form, lines, profile):
        first = lines[0]
        return create_subgroup_order(
            customer_name=form.cleaned_data["customer_name"],
            whatsapp_number=form.cleaned_data["whatsapp_number"],
            batch_id=first.batch_id,
            sub_group_id=first.sub_group_id,
            items=[LineItem(product_id=int(line.id), quantity=line.quantity) for line in lines],
            profile=profile,
        )

    def contact_number(self, batch):
        sub_group = batch.sub_group
        return sub_group.whatsapp_number if sub_group else ""


class GroupBuyCheckoutView(PooledCheckoutView):
    """POST /groupbuy/checkout/group-buy/ (same body as the sub-group checkout)"""

    mode = PurchaseMode.GROUP_BUY

    def place_order(self, form, lines, profile):
        return create_group_buy_order(
            customer_name=form.cleaned_data["customer_name"],
            whatsapp_number=form.cleaned_data["whatsapp_number"],
            batch_id=lines[0].batch_id,
            items=[LineItem(product_id=int(line.id), quantity=line.quantity) for line in lines],
            profile=profile,
        )

    def contact_number(self, batch):
        return settings.STORE_WHATSAPP_NUMBER
