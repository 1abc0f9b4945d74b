from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import OwnedManager
from ..services.totals import compute_totals
from .customer import Customer

QUOTE_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("sent", "Sent"),
    ("accepted", "Accepted"),
    ("declined", "Declined"),
]
""" Workflow:
    draft = still being written.
    sent = handed to the customer.
    accepted / declined = customer's answer.
    "expired" and "converted" are never stored, see services.status """


class Quote(models.Model):  # Represents an estimate given to a customer

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="quotes",
    )
    customer = models.ForeignKey(
        Customer,
        # prevent deleting a customer who has quotes
        on_delete=models.PROTECT,
        related_name="quotes",
    )

    # human-readable (e.g. "Q-20260116-1001"), fixed once created
    quote_number = models.CharField(max_length=64)
    issue_date = models.DateField()
    expiry_date = models.DateField(null=True, blank=True)

    # Embedded line items:
    # [{"description", "quantity", "unit_price", "tax_rate"}, ...]
    items = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=10, choices=QUOTE_STATUS_CHOICES, default="draft"
    )
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce owner scoping
    objects = OwnedManager()

    class Meta:
        indexes = [
            models.Index(fields=["owner", "created_at"], name="quote_owner_created_idx"),
            models.Index(fields=["owner", "customer"], name="quote_owner_customer_idx"),
        ]
        constraints = [
            # Each user numbers their own quotes
            models.UniqueConstraint(
                fields=["owner", "quote_number"],
                name="uq_quote_owner_number",
            )
        ]

    def __str__(self):
        return f"Quote {self.quote_number or self.pk}"

    @property
    def totals(self):
        return compute_totals(self.items)

    def is_converted(self):
        """A quote is converted once any invoice points at it."""
        if not self.pk:
            return False
        return self.invoices.exists()

    def clean(self):
        # Ensure customer chosen belongs to the same user
        if self.customer_id and self.owner_id:
            if self.customer.owner_id != self.owner_id:
                raise ValidationError(
                    "Customer must belong to the quote's owner.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
