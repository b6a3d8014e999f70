"""Sub-groups, batches and batch products."""

from django.db import models


class SubGroup(models.Model):
    """A regional buying group run by a host."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    region = models.CharField(max_length=100)
    city = models.CharField(max_length=100, blank=True)
    host = models.ForeignKey(
        "profile.Profile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="hosted_sub_groups",
    )
    join_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    whatsapp_number = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.region})"

    def as_dict(self):
        return {
            "id": self.pk,
            "name": self.name,
            "description": self.description,
            "region": self.region,
            "city": self.city,
            "join_fee": self.join_fee,
            "whatsapp_number": self.whatsapp_number,
            "is_active": self.is_active,
        }


class Batch(models.Model):
    """A collection window in which orders pool toward a vial target."""

    class Kind(models.TextChoices):
        GROUP_BUY = "group_buy", "Group buy"
        SUB_GROUP = "sub_group", "Sub-group"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        PAYMENT_COLLECTION = "payment_collection", "Payment collection"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.GROUP_BUY)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    target_vials = models.PositiveIntegerField(default=0)
    current_vials = models.PositiveIntegerField(default=0)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    host = models.ForeignKey(
        "profile.Profile",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="hosted_batches",
    )
    sub_group = models.ForeignKey(
        SubGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="batches",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "batches"

    def __str__(self):
        return self.name

    @property
    def progress_percentage(self):
        if not self.target_vials:
            return 0
        return min(100, round(self.current_vials * 100 / self.target_vials))

    def as_dict(self):
        return {
            "id": self.pk,
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
            "status": self.status,
            "target_vials": self.target_vials,
            "current_vials": self.current_vials,
            "progress_percentage": self.progress_percentage,
            "discount_percentage": self.discount_percentage,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "sub_group_id": self.sub_group_id,
            "host_id": self.host_id,
        }


class BatchProduct(models.Model):
    """A product offered in a batch at its own per-vial price."""

    batch = models.ForeignKey(Batch, on_delete=models.CASCADE, related_name="batch_products")
    product = models.ForeignKey("store.Product", on_delete=models.PROTECT, related_name="batch_products")
    target_vials = models.PositiveIntegerField(default=0)
    current_vials = models.PositiveIntegerField(default=0)
    price_per_vial = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["product__name"]
        constraints = [
            models.UniqueConstraint(fields=["batch", "product"], name="unique_batch_product"),
        ]

    def __str__(self):
        return f"{self.product} in {self.batch}"

    @property
    def remaining_vials(self):
        """Vials still available, or None when the product has no target."""
        if not self.target_vials:
            return None
        return max(0, self.target_vials - self.current_vials)

    def as_dict(self):
        return {
            "id": self.pk,
            "product": self.product.as_dict(),
            "target_vials": self.target_vials,
            "current_vials": self.current_vials,
            "remaining_vials": self.remaining_vials,
            "price_per_vial": self.price_per_vial,
        }
