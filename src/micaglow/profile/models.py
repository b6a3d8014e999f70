"""Store-side user profiles keyed by the identity provider's id."""

from django.db import models


class Role(models.TextChoices):
    ADMIN = "admin", "Admin"
    HOST = "host", "Host"
    CUSTOMER = "customer", "Customer"


class Profile(models.Model):
    """One per authenticated identity; carries the role used for gating."""

    external_id = models.CharField(max_length=255, unique=True)
    email = models.EmailField(blank=True)
    first_name = models.CharField(max_length=100, blank=True, null=True)
    last_name = models.CharField(max_length=100, blank=True, null=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CUSTOMER)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def display_name(self):
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email.split("@")[0]

    def as_dict(self):
        return {
            "id": self.pk,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
