from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import OwnedManager


# ---------- Customer ----------
# Represents a client who receives quotes and invoices
class Customer(models.Model):
    # Every customer belongs to exactly one user
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customers",
    )

    # The customer's legal or trade name
    name = models.CharField(max_length=200)

    # Optional contact details for billing/communication
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    company = models.CharField(max_length=200, blank=True, default="")
    address = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce owner scoping
    objects = OwnedManager()

    class Meta:
        indexes = [
            models.Index(fields=["owner", "created_at"], name="customer_owner_created_idx"),
            models.Index(fields=["owner", "name"], name="customer_owner_name_idx"),
        ]

    # Display customer name in admin/UI
    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Customer name is required")
        # stored lower-case, like the address book it came from
        self.email = (self.email or "").strip().lower()
        return super().clean()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
