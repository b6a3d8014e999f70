"""Order models.

Orders are written once at placement. Afterwards only ``status`` and
``payment_status`` change, through ``services.update_order_status``.
"""

from django.core.validators import MinValueValidator
from django.db import models


class Order(models.Model):
    class Kind(models.TextChoices):
        INDIVIDUAL = "individual", "Individual"
        GROUP_BUY = "group_buy", "Group buy"
        SUB_GROUP = "sub_group", "Sub-group"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        PROCESSING = "processing", "Processing"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        REFUNDED = "refunded", "Refunded"
        FAILED = "failed", "Failed"

    order_code = models.CharField(max_length=32, unique=True)
    kind = models.CharField(max_length=20, choices=Kind.choices)
    profile = models.ForeignKey(
        "profile.Profile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Customer
    customer_name = models.CharField(max_length=255)
    whatsapp_number = models.CharField(max_length=20)
    customer_email = models.EmailField(blank=True)

    # Shipping (individual orders)
    shipping_address = models.TextField(blank=True)
    shipping_city = models.CharField(max_length=100, blank=True)
    shipping_province = models.CharField(max_length=100, blank=True)
    shipping_zip_code = models.CharField(max_length=20, blank=True)

    batch = models.ForeignKey(
        "groupbuy.Batch",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    sub_group = models.ForeignKey(
        "groupbuy.SubGroup",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["profile", "-created_at"], name="order_profile_created_idx"),
            models.Index(fields=["batch", "status"], name="order_batch_status_idx"),
        ]

    def __str__(self):
        return self.order_code

    @property
    def total_vials(self):
        return sum(item.quantity for item in self.items.all())

    def as_dict(self, with_items=True):
        data = {
            "id": self.pk,
            "order_code": self.order_code,
            "kind": self.kind,
            "customer_name": self.customer_name,
            "whatsapp_number": self.whatsapp_number,
            "subtotal": self.subtotal,
            "shipping_cost": self.shipping_cost,
            "total_amount": self.total_amount,
            "status": self.status,
            "payment_status": self.payment_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "batch": (
                {"id": self.batch_id, "name": self.batch.name, "status": self.batch.status}
                if self.batch_id
                else None
            ),
            "sub_group_id": self.sub_group_id,
        }
        if with_items:
            data["items"] = [item.as_dict() for item in self.items.all()]
        return data


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("store.Product", on_delete=models.PROTECT, related_name="order_items")
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product}"

    def as_dict(self):
        return {
            "id": self.pk,
            "product_id": self.product_id,
            "product_name": self.product.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
        }
