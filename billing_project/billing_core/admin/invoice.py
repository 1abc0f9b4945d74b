from django.contrib import admin

from ..models import Invoice
from ..services import lifecycle
from ..services.ledger import invoice_ledger
from ..services.status import effective_invoice_status, today_in_reference_zone
from .actions import mark_inv_as_paid, mark_inv_as_unpaid
from .forms import InvoiceAdminForm
from .mixins import OwnerAdminMixin

INVOICE_EDITABLE = ("issue_date", "due_date", "items", "status", "notes")


# Register `Invoice` model
@admin.register(Invoice)
class InvoiceAdmin(OwnerAdminMixin, admin.ModelAdmin):
    form = InvoiceAdminForm
    list_display = (
        "id",
        "owner",
        "invoice_number",
        "customer",
        "quote",
        "issue_date",
        "due_date",
        "current_status",
        "total",
        "balance",
    )
    list_filter = ("owner", "status", "issue_date")
    actions = [mark_inv_as_paid, mark_inv_as_unpaid]
    search_fields = ("invoice_number", "customer__name")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("owner", "customer", "quote").prefetch_related(
            "payments")

    @admin.display(description="Status")
    def current_status(self, obj):
        return effective_invoice_status(obj, today_in_reference_zone())

    @admin.display(description="Total")
    def total(self, obj):
        return obj.totals.total

    @admin.display(description="Remaining")
    def balance(self, obj):
        return invoice_ledger(obj, obj.payments.all()).remaining_balance

    """ Paid invoices are immutable at admin level """

    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "paid":
            # every field becomes read-only; use the actions to reopen it
            return [f.name for f in self.model._meta.fields]
        # quote and customer are fixed once the invoice exists
        if obj:
            return ("owner", "quote", "customer", "invoice_number")
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        # payments are never deleted along with an invoice
        if obj and obj.payments.exists():
            return False
        return super().has_delete_permission(request, obj)

    def has_add_permission(self, request):
        # invoices are only ever raised from an accepted quote via the API
        return False

    def save_model(self, request, obj, form, change):
        # same path as the API so policy checks and the audit trail apply
        changes = {field: form.cleaned_data[field]
                   for field in form.changed_data if field in INVOICE_EDITABLE}
        if changes:
            lifecycle.update_invoice(obj.owner, obj.pk, changes)
        obj.refresh_from_db()
