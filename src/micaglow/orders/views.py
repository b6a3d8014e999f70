"""Order tracking, customer dashboard and host order management."""

import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from micaglow.core.mixins import HostPortalMixin, SignedInRequiredMixin
from micaglow.core.views import invalid_json_response, read_json
from micaglow.groupbuy.models import Batch
from micaglow.groupbuy.services import BatchTransitionError, transition_batch

from .dashboard import get_dashboard, summarize_orders
from .models import Order
from .services import find_order_by_code, related_batch_orders, update_order_status

logger = logging.getLogger(__name__)


class DashboardView(SignedInRequiredMixin, View):
    """Order history and spend summary for the signed-in customer.

    GET /dashboard/
    """

    def get(self, request):
        return JsonResponse(get_dashboard(self.get_resolver().profile))


class TrackOrderView(View):
    """Look up an order by its code. Public.

    GET /orders/track/?code=MG-20260115-4F2A9C

    Group-buy orders also list the same customer's other orders in the batch.
    """

    def get(self, request):
        code = request.GET.get("code", "")
        if not code.strip():
            return JsonResponse({"error": "Enter an order code"}, status=400)

        try:
            order = find_order_by_code(code)
            related = related_batch_orders(order) if order else []
        except DatabaseError:
            logger.exception("Order lookup failed for %s", code)
            return JsonResponse({"error": "Failed to look up order"}, status=500)

        if order is None:
            return JsonResponse({"error": "Order not found"}, status=404)

        return JsonResponse({
            "order": order.as_dict(),
            "batch_orders": [o.as_dict() for o in related],
        })


class MyOrderCodesView(SignedInRequiredMixin, View):
    """Codes of the signed-in customer's orders, newest first.

    GET /orders/mine/
    """

    def get(self, request):
        profile = self.get_resolver().profile
        codes = []
        if profile is not None:
            try:
                codes = list(
                    Order.objects.filter(profile=profile)
                    .order_by("-created_at", "-pk")
                    .values_list("order_code", flat=True)
                )
            except DatabaseError:
                logger.exception("Failed to list order codes for profile %s", profile.pk)
        return JsonResponse({"order_codes": codes})


class HostScopedMixin(HostPortalMixin):
    """Hosts only see batches they run; admins see every batch."""

    def get_batches(self):
        batches = Batch.objects.select_related("sub_group")
        if self.acting_as_admin():
            return batches
        profile = self.get_resolver().profile
        if profile is None:
            return batches.none()
        return batches.filter(host=profile)


class HostBatchListView(HostScopedMixin, View):
    """GET /host/batches/?status=active"""

    def get(self, request):
        batches = self.get_batches()
        status = request.GET.get("status")
        if status:
            batches = batches.filter(status=status)
        return JsonResponse({"batches": [batch.as_dict() for batch in batches]})


class HostBatchOrdersView(HostScopedMixin, View):
    """Orders in one batch with filters and a summary.

    GET /host/batches/<batch_id>/orders/?status=pending&payment_status=paid
    """

    def get(self, request, batch_id):
        batch = get_object_or_404(self.get_batches(), pk=batch_id)
        orders = batch.orders.select_related("batch").prefetch_related("items__product")

        status = request.GET.get("status")
        if status:
            orders = orders.filter(status=status)
        payment_status = request.GET.get("payment_status")
        if payment_status:
            orders = orders.filter(payment_status=payment_status)

        orders = list(orders.order_by("-created_at", "-pk"))
        return JsonResponse({
            "batch": batch.as_dict(),
            "orders": [order.as_dict() for order in orders],
            "summary": summarize_orders(orders).as_dict(),
        })


class HostBatchStatusView(HostScopedMixin, View):
    """Move a batch along its lifecycle.

    POST /host/batches/<batch_id>/status/
    {
        "status": "payment_collection"
    }
    """

    def post(self, request, batch_id):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        batch = get_object_or_404(self.get_batches(), pk=batch_id)
        try:
            transition_batch(batch, data.get("status", ""))
        except BatchTransitionError as e:
            return JsonResponse({"error": str(e)}, status=400)

        return JsonResponse({"batch": batch.as_dict()})


class HostOrderStatusView(HostScopedMixin, View):
    """Update an order's status and/or payment status.

    POST /host/orders/<order_id>/status/
    {
        "status": "confirmed",
        "payment_status": "paid"
    }
    """

    def post(self, request, order_id):
        data = read_json(request)
        if data is None:
            return invalid_json_response()

        orders = Order.objects.select_related("batch").prefetch_related("items__product")
        if not self.acting_as_admin():
            orders = orders.filter(batch__in=self.get_batches())
        order = get_object_or_404(orders, pk=order_id)

        try:
            update_order_status(order, status=data.get("status"), payment_status=data.get("payment_status"))
        except ValueError as e:
            return JsonResponse({"error": str(e)}, status=400)
        except DatabaseError:
            logger.exception("Failed to update order %s", order_id)
            return JsonResponse({"error": "Failed to update order"}, status=400)

        return JsonResponse({"order": order.as_dict()})
