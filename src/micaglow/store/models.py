"""Catalog models."""

from django.db import models


class Product(models.Model):
    """A peptide product sold by the vial or by the box."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100)
    price_per_vial = models.DecimalField(max_digits=10, decimal_places=2)
    price_per_box = models.DecimalField(max_digits=10, decimal_places=2)
    vials_per_box = models.PositiveIntegerField(default=10)
    is_active = models.BooleanField(default=True)
    image_url = models.URLField(max_length=500, blank=True)
    specifications = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "name"]

    def __str__(self):
        return self.name

    def as_dict(self):
        return {
            "id": self.pk,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "price_per_vial": self.price_per_vial,
            "price_per_box": self.price_per_box,
            "vials_per_box": self.vials_per_box,
            "image_url": self.image_url or None,
            "specifications": self.specifications,
        }
