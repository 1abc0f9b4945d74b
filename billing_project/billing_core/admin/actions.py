from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from ..services.lifecycle import update_invoice

# ---------- Admin actions ----------


def _set_invoice_status(modeladmin, request, queryset, status):
    success = 0
    for inv in queryset:
        try:
            # same path as the API so the audit trail stays complete
            update_invoice(inv.owner, inv.pk, {"status": status})
            success += 1
        except ValidationError as exc:
            modeladmin.message_user(
                request,
                f"Could not update invoice {inv}: {'; '.join(exc.messages)}",
                level=messages.ERROR,
            )
    modeladmin.message_user(
        request,
        f"Marked {success} of {queryset.count()} invoices as {status}.",
        level=messages.SUCCESS,
    )


@admin.action(description="Mark selected invoices as Paid")
def mark_inv_as_paid(modeladmin, request, queryset):
    _set_invoice_status(modeladmin, request, queryset, "paid")


@admin.action(description="Mark selected invoices as Unpaid")
def mark_inv_as_unpaid(modeladmin, request, queryset):
    _set_invoice_status(modeladmin, request, queryset, "unpaid")
