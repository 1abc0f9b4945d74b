from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from ..exceptions import PolicyViolation
from ..managers import OwnedManager
from .invoice import Invoice

PAYMENT_METHOD_CHOICES = [
    ("cash", "Cash"),
    ("card", "Card"),
    ("bank_transfer", "Bank transfer"),
    ("paypal", "PayPal"),
]

PAYMENT_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("completed", "Completed"),
    ("failed", "Failed"),
]


class Payment(models.Model):
    """Money received against an invoice.

    Recorded once and never edited; several payments may settle one
    invoice, and only completed ones count toward what has been paid.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    invoice = models.ForeignKey(
        Invoice,
        # deleting an invoice never takes its payments with it
        on_delete=models.PROTECT,
        related_name="payments",
    )
    # Receipt reference (e.g. "PAY-3f9c2a1b7e")
    payment_number = models.CharField(max_length=64)

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHOD_CHOICES)
    status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default="completed"
    )
    payment_date = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce owner scoping
    objects = OwnedManager()

    class Meta:
        indexes = [
            models.Index(fields=["owner", "payment_date"], name="payment_owner_date_idx"),
            models.Index(fields=["owner", "invoice"], name="payment_owner_invoice_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["owner", "payment_number"],
                name="uq_payment_owner_number",
            ),
            # Payments are always money in
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_positive_amount",
            ),
        ]

    def __str__(self):
        return f"{self.payment_number} ({self.amount})"

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError("Amount must be greater than 0")
        # Prevent cross-user contamination
        if self.owner_id and self.invoice_id:
            if self.invoice.owner_id != self.owner_id:
                raise ValidationError(
                    "Invoice must belong to the payment's owner.")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PolicyViolation("Recorded payments cannot be modified.")
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
