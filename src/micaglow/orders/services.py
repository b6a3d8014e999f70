"""Order placement and order status services.

Placement against a batch is one transaction: the batch row and its
product rows are locked, prices come from the batch, vial counts are
incremented with F() expressions and a progress broadcast is queued for
after commit. Any failure raises OrderPlacementError and leaves the
database untouched.
"""

import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import quote

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from micaglow.core.money import format_peso, round_money
from micaglow.groupbuy.broadcast import broadcast_batch_progress_on_commit
from micaglow.groupbuy.models import Batch, BatchProduct
from micaglow.store.models import Product

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_CODE_PREFIX = "MG"
ORDER_CODE_ATTEMPTS = 5


class OrderPlacementError(Exception):
    """Order could not be placed. ``message`` is safe to show to the customer."""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class LineItem:
    """One requested product line. Prices are never taken from the client."""

    product_id: int
    quantity: int

    @classmethod
    def from_dict(cls, data):
        try:
            return cls(product_id=int(data["product_id"]), quantity=int(data["quantity"]))
        except (KeyError, TypeError, ValueError):
            raise OrderPlacementError("invalid_quantity", "Each item needs a product and a whole-number quantity.")


@dataclass(frozen=True)
class OrderConfirmation:
    order_id: int
    order_code: str
    total_amount: Decimal
    total_vials: int
    batch_id: int | None = None
    consolidated: bool = False

    def as_dict(self):
        return {
            "order_id": self.order_id,
            "order_code": self.order_code,
            "total_amount": self.total_amount,
            "total_vials": self.total_vials,
            "batch_id": self.batch_id,
            "consolidated": self.consolidated,
        }


def generate_order_code(now=None) -> str:
    """New unique order code, e.g. ``MG-20260115-4F2A9C``."""
    now = now or timezone.now()
    for _ in range(ORDER_CODE_ATTEMPTS):
        code = f"{ORDER_CODE_PREFIX}-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"
        if not Order.objects.filter(order_code=code).exists():
            return code
    raise OrderPlacementError("order_code_exhausted", "Could not allocate an order code. Please try again.")


def _insert_order(**fields) -> Order:
    """Create an order under a fresh code.

    A concurrent request can take the same code between the check and the
    insert; the insert then runs again with a new code.
    """
    for _ in range(ORDER_CODE_ATTEMPTS):
        code = generate_order_code()
        try:
            with transaction.atomic():
                return Order.objects.create(order_code=code, **fields)
        except IntegrityError:
            if not Order.objects.filter(order_code=code).exists():
                raise
            logger.warning("Order code %s was taken concurrently, retrying", code)
    raise OrderPlacementError("order_code_exhausted", "Could not allocate an order code. Please try again.")


def _normalize_lines(items):
    """Validate requested lines and merge repeats of the same product."""
    lines = [item if isinstance(item, LineItem) else LineItem.from_dict(item) for item in items or ()]
    if not lines:
        raise OrderPlacementError("empty_order", "Your order has no items.")

    merged = {}
    for line in lines:
        if line.quantity < 1:
            raise OrderPlacementError("invalid_quantity", "Quantities must be at least 1.")
        merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity

    return [LineItem(product_id=product_id, quantity=quantity) for product_id, quantity in merged.items()]


def _check_customer(customer_name, whatsapp_number):
    if not (customer_name or "").strip() or not (whatsapp_number or "").strip():
        raise OrderPlacementError("missing_customer_info", "Name and WhatsApp number are required.")


def _lock_active_batch(batch_id) -> Batch:
    try:
        batch = Batch.objects.select_for_update().get(pk=batch_id)
    except Batch.DoesNotExist:
        raise OrderPlacementError("batch_not_found", "This batch no longer exists.")

    if batch.status != Batch.Status.ACTIVE:
        raise OrderPlacementError("batch_not_active", f"Batch {batch.name} is not accepting orders.")
    return batch


def _price_batch_lines(batch, lines):
    """Lock the batch products for the lines and check vial caps.

    Returns:
        List of (batch_product, quantity) pairs in request order.
    """
    product_ids = [line.product_id for line in lines]
    batch_products = {
        bp.product_id: bp
        for bp in BatchProduct.objects.select_for_update()
        .select_related("product")
        .filter(batch=batch, product_id__in=product_ids)
    }

    priced = []
    for line in lines:
        bp = batch_products.get(line.product_id)
        if bp is None:
            raise OrderPlacementError(
                "product_not_in_batch", f"Product {line.product_id} is not part of batch {batch.name}."
            )
        if not bp.product.is_active:
            raise OrderPlacementError("product_unavailable", f"{bp.product.name} is no longer available.")
        remaining = bp.remaining_vials
        if remaining is not None and line.quantity > remaining:
            raise OrderPlacementError(
                "insufficient_vials",
                f"Only {remaining} vial(s) of {bp.product.name} are left in this batch.",
            )
        priced.append((bp, line.quantity))
    return priced


def _record_batch_progress(batch, priced):
    total_vials = 0
    for bp, quantity in priced:
        BatchProduct.objects.filter(pk=bp.pk).update(current_vials=F("current_vials") + quantity)
        total_vials += quantity
    Batch.objects.filter(pk=batch.pk).update(current_vials=F("current_vials") + total_vials)
    broadcast_batch_progress_on_commit(batch.pk)
    return total_vials


def _create_batch_order(kind, batch, priced, customer_name, whatsapp_number, profile):
    subtotal = round_money(sum((bp.price_per_vial * quantity for bp, quantity in priced), Decimal("0")))
    order = _insert_order(
        kind=kind,
        profile=profile,
        customer_name=customer_name.strip(),
        whatsapp_number=whatsapp_number.strip(),
        batch=batch,
        sub_group=batch.sub_group,
        subtotal=subtotal,
        total_amount=subtotal,
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product=bp.product,
            quantity=quantity,
            unit_price=bp.price_per_vial,
            total_price=round_money(bp.price_per_vial * quantity),
        )
        for bp, quantity in priced
    ])
    return order


@transaction.atomic
def create_subgroup_order(
    customer_name: str,
    whatsapp_number: str,
    batch_id: int,
    sub_group_id: int,
    items,
    profile=None,
) -> OrderConfirmation:
    """Place an order in a regional sub-group batch.

    Args:
        customer_name: Name the host will see
        whatsapp_number: Customer contact
        batch_id: The sub-group's active batch
        sub_group_id: Must be the batch's sub-group
        items: LineItem objects or dicts with product_id and quantity (vials)
        profile: The signed-in customer's Profile, if any

    Returns:
        OrderConfirmation with the new order code

    Raises:
        OrderPlacementError: Nothing was written
    """
    _check_customer(customer_name, whatsapp_number)
    lines = _normalize_lines(items)

    batch = _lock_active_batch(batch_id)
    if batch.sub_group_id is None or batch.sub_group_id != int(sub_group_id):
        raise OrderPlacementError("batch_mismatch", "This batch does not belong to the selected region.")

    priced = _price_batch_lines(batch, lines)
    order = _create_batch_order(Order.Kind.SUB_GROUP, batch, priced, customer_name, whatsapp_number, profile)
    total_vials = _record_batch_progress(batch, priced)

    logger.info(
        "Sub-group order %s placed in batch %s: %s vials, %s",
        order.order_code, batch.pk, total_vials, order.total_amount,
    )
    return OrderConfirmation(
        order_id=order.pk,
        order_code=order.order_code,
        total_amount=order.total_amount,
        total_vials=total_vials,
        batch_id=batch.pk,
    )


def _consolidate(order, priced):
    """Add lines to an existing pending order, merging same-product lines."""
    existing = {item.product_id: item for item in order.items.select_for_update()}
    for bp, quantity in priced:
        item = existing.get(bp.product_id)
        if item is None:
            OrderItem.objects.create(
                order=order,
                product=bp.product,
                quantity=quantity,
                unit_price=bp.price_per_vial,
                total_price=round_money(bp.price_per_vial * quantity),
            )
            continue
        item.quantity += quantity
        item.total_price = round_money(item.unit_price * item.quantity)
        item.save(update_fields=["quantity", "total_price"])

    subtotal = round_money(sum((item.total_price for item in order.items.all()), Decimal("0")))
    order.subtotal = subtotal
    order.total_amount = subtotal + order.shipping_cost
    order.save(update_fields=["subtotal", "total_amount", "updated_at"])
    return order


@transaction.atomic
def create_group_buy_order(
    customer_name: str,
    whatsapp_number: str,
    batch_id: int,
    items,
    profile=None,
) -> OrderConfirmation:
    """Place an order in an admin-run group-buy batch.

    A signed-in customer's lines are merged into their pending, unpaid
    order in the same batch if one exists, so each customer has one order
    per batch.

    Raises:
        OrderPlacementError: Nothing was written
    """
    _check_customer(customer_name, whatsapp_number)
    lines = _normalize_lines(items)

    batch = _lock_active_batch(batch_id)
    if batch.kind != Batch.Kind.GROUP_BUY:
        raise OrderPlacementError("batch_mismatch", "This batch is not an open group buy.")

    priced = _price_batch_lines(batch, lines)

    existing = None
    if profile is not None:
        existing = (
            Order.objects.select_for_update()
            .filter(
                profile=profile,
                batch=batch,
                kind=Order.Kind.GROUP_BUY,
                status=Order.Status.PENDING,
                payment_status=Order.PaymentStatus.PENDING,
            )
            .order_by("-created_at", "-pk")
            .first()
        )

    if existing is not None:
        order = _consolidate(existing, priced)
    else:
        order = _create_batch_order(Order.Kind.GROUP_BUY, batch, priced, customer_name, whatsapp_number, profile)
    total_vials = _record_batch_progress(batch, priced)

    logger.info(
        "Group-buy order %s %s in batch %s: %s vials",
        order.order_code, "updated" if existing else "placed", batch.pk, total_vials,
    )
    return OrderConfirmation(
        order_id=order.pk,
        order_code=order.order_code,
        total_amount=order.total_amount,
        total_vials=total_vials,
        batch_id=batch.pk,
        consolidated=existing is not None,
    )


@transaction.atomic
def create_individual_order(
    *,
    customer_name: str,
    whatsapp_number: str,
    shipping_address: str,
    shipping_city: str,
    shipping_province: str,
    items,
    customer_email: str = "",
    shipping_zip_code: str = "",
    profile=None,
) -> OrderConfirmation:
    """Place a non-pooled order priced per box, plus the shipping fee.

    ``items`` quantities are boxes.

    Raises:
        OrderPlacementError: Nothing was written
    """
    _check_customer(customer_name, whatsapp_number)
    lines = _normalize_lines(items)

    products = Product.objects.in_bulk([line.product_id for line in lines])
    priced = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None or not product.is_active:
            raise OrderPlacementError("product_unavailable", f"Product {line.product_id} is not available.")
        priced.append((product, line.quantity))

    subtotal = round_money(sum((product.price_per_box * quantity for product, quantity in priced), Decimal("0")))
    shipping_cost = round_money(settings.INDIVIDUAL_SHIPPING_FEE)

    order = _insert_order(
        kind=Order.Kind.INDIVIDUAL,
        profile=profile,
        customer_name=customer_name.strip(),
        whatsapp_number=whatsapp_number.strip(),
        customer_email=customer_email or "",
        shipping_address=shipping_address,
        shipping_city=shipping_city,
        shipping_province=shipping_province,
        shipping_zip_code=shipping_zip_code or "",
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total_amount=subtotal + shipping_cost,
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.price_per_box,
            total_price=round_money(product.price_per_box * quantity),
        )
        for product, quantity in priced
    ])

    logger.info("Individual order %s placed: %s", order.order_code, order.total_amount)
    return OrderConfirmation(
        order_id=order.pk,
        order_code=order.order_code,
        total_amount=order.total_amount,
        total_vials=sum(product.vials_per_box * quantity for product, quantity in priced),
    )


def update_order_status(order: Order, status: str | None = None, payment_status: str | None = None) -> Order:
    """Change an order's fulfilment and/or payment status.

    Raises:
        ValueError: If a value is not a known status
    """
    update_fields = []
    if status is not None:
        if status not in Order.Status.values:
            raise ValueError(f"Invalid status: {status}. Must be one of {Order.Status.values}")
        order.status = status
        update_fields.append("status")
    if payment_status is not None:
        if payment_status not in Order.PaymentStatus.values:
            raise ValueError(
                f"Invalid payment status: {payment_status}. Must be one of {Order.PaymentStatus.values}"
            )
        order.payment_status = payment_status
        update_fields.append("payment_status")

    if not update_fields:
        return order

    order.save(update_fields=update_fields + ["updated_at"])
    logger.info(
        "Order %s updated: status=%s payment_status=%s",
        order.order_code, order.status, order.payment_status,
    )
    return order


def _orders_with_details():
    return Order.objects.select_related("batch", "sub_group").prefetch_related("items__product")


def find_order_by_code(code: str) -> Order | None:
    code = (code or "").strip().upper()
    if not code:
        return None
    return _orders_with_details().filter(order_code=code).first()


def related_batch_orders(order: Order):
    """The same customer's other orders in the order's group-buy batch."""
    if order.kind != Order.Kind.GROUP_BUY or order.batch_id is None:
        return []

    orders = _orders_with_details().filter(batch_id=order.batch_id).exclude(pk=order.pk)
    if order.profile_id is not None:
        orders = orders.filter(profile_id=order.profile_id)
    else:
        orders = orders.filter(profile__isnull=True, whatsapp_number=order.whatsapp_number)
    return list(orders.order_by("-created_at", "-pk"))


def build_whatsapp_url(number: str, order: Order, heading: str = "") -> str:
    """wa.me link with a prefilled order summary for the host."""
    lines = [
        f"• {item.product.name}: {item.quantity} × {format_peso(item.unit_price)} = {format_peso(item.total_price)}"
        for item in order.items.all()
    ]
    message = "\n".join([
        heading or "Hi! I'd like to confirm my order.",
        "",
        f"Order Code: {order.order_code}",
        f"Customer: {order.customer_name}",
        f"WhatsApp: {order.whatsapp_number}",
        "",
        "Order Details:",
        *lines,
        "",
        f"Total: {format_peso(order.total_amount)}",
        "",
        "Please confirm my order. Thank you!",
    ])
    digits = "".join(ch for ch in number or settings.STORE_WHATSAPP_NUMBER if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(message)}"
