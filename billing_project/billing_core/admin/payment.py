from django.contrib import admin

from ..models import Payment
from .mixins import OwnerAdminMixin
from .ReadOnly import ReadOnlyAdmin


# Payments are financial records: view only
@admin.register(Payment)
class PaymentAdmin(OwnerAdminMixin, ReadOnlyAdmin):
    list_display = (
        "id",
        "owner",
        "payment_number",
        "invoice",
        "amount",
        "payment_method",
        "status",
        "payment_date",
    )
    list_filter = ("owner", "status", "payment_method")
    search_fields = ("payment_number", "invoice__invoice_number")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("owner", "invoice")
