from django.contrib import admin

from ..models import Quote
from ..services import lifecycle
from ..services.status import effective_quote_status, today_in_reference_zone
from .forms import QuoteAdminForm
from .mixins import OwnerAdminMixin

QUOTE_EDITABLE = ("customer", "issue_date", "expiry_date", "items", "status", "notes")


# Register `Quote` model
@admin.register(Quote)
class QuoteAdmin(OwnerAdminMixin, admin.ModelAdmin):
    form = QuoteAdminForm
    list_display = (
        "id",
        "owner",
        "quote_number",
        "customer",
        "issue_date",
        "expiry_date",
        "status",
        "current_status",
        "total",
    )
    list_filter = ("owner", "status", "issue_date")
    search_fields = ("quote_number", "customer__name")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("owner", "customer")

    # stored status is editable, the derived one is shown alongside
    @admin.display(description="Effective status")
    def current_status(self, obj):
        return effective_quote_status(obj, today_in_reference_zone())

    @admin.display(description="Total")
    def total(self, obj):
        return obj.totals.total

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return super().get_readonly_fields(request, obj)
        # the number is fixed once issued
        fields = ["owner", "quote_number"]
        # a converted quote keeps what its invoice was raised from
        if obj.is_converted():
            fields += ["customer", "status", "items"]
        return fields

    def save_model(self, request, obj, form, change):
        # same path as the API so policy checks and the audit trail apply
        if not change:
            owner = obj.owner if obj.owner_id else request.user
            data = lifecycle.create_quote(owner, {
                "customer": obj.customer_id,
                "quote_number": obj.quote_number,
                "issue_date": obj.issue_date,
                "expiry_date": obj.expiry_date,
                "items": obj.items,
                "status": obj.status,
                "notes": obj.notes,
            })
            obj.pk = data["id"]
        else:
            changes = {}
            for field in form.changed_data:
                if field not in QUOTE_EDITABLE:
                    continue
                value = form.cleaned_data[field]
                changes[field] = value.pk if field == "customer" else value
            if changes:
                lifecycle.update_quote(obj.owner, obj.pk, changes)
        obj.refresh_from_db()
