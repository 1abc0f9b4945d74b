from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..managers import OwnedManager
from ..services.totals import compute_totals
from .customer import Customer
from .quote import Quote

INV_STATUS_CHOICES = [
    ("unpaid", "Unpaid"),
    ("paid", "Paid"),
]
""" Workflow:
    unpaid = issued, waiting for the user to mark it settled.
    paid = explicitly marked settled.
    "overdue" is derived at read time and never stored. """


class Invoice(models.Model):  # Represents a customer invoice

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="invoices",
    )
    customer = models.ForeignKey(
        Customer,
        # prevent deleting customer who has an invoice
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    # Every invoice is raised from exactly one quote
    quote = models.ForeignKey(
        Quote,
        # a quote that backs an invoice can't be deleted
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    # human-readable (e.g. "INV-2026-001")
    invoice_number = models.CharField(max_length=64)
    issue_date = models.DateField()  # issue date
    due_date = models.DateField()  # payment deadline

    # Copy of the quote's line items taken at conversion time
    items = models.JSONField(default=list, blank=True)

    status = models.CharField(
        max_length=10, choices=INV_STATUS_CHOICES, default="unpaid"
    )
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce owner scoping
    objects = OwnedManager()

    class Meta:
        # Optimize for fast lookups by invoice number or customer
        indexes = [
            models.Index(fields=["owner", "created_at"], name="invoice_owner_created_idx"),
            models.Index(fields=["owner", "customer"], name="invoice_owner_customer_idx"),
            models.Index(fields=["owner", "quote"], name="invoice_owner_quote_idx"),
        ]

        constraints = [
            # Within one user's books, each invoice number must be unique
            # Across users, duplicates are allowed
            models.UniqueConstraint(
                fields=["owner", "invoice_number"],
                name="uq_invoice_owner_number",
            )
        ]

    def __str__(self):
        # If no invoice number, fall back to database ID
        return f"Inv {self.invoice_number or self.pk}"

    @property
    def totals(self):
        return compute_totals(self.items)

    def clean(self):
        # Tenant safety: customer and quote must share the invoice's owner
        if self.owner_id and self.customer_id:
            if self.customer.owner_id != self.owner_id:
                raise ValidationError(
                    "Customer must belong to the invoice's owner.")
        if self.owner_id and self.quote_id:
            if self.quote.owner_id != self.owner_id:
                raise ValidationError(
                    "Quote must belong to the invoice's owner.")

    def save(self, *args, **kwargs):
        self.full_clean()  # will trigger clean()
        return super().save(*args, **kwargs)
