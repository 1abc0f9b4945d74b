from django import forms

from ..forms import LineItemsField
from ..models import Invoice, Quote

# -----------------------------
# Admin forms: line items go through the same rules as the API
# ----------------------------


class LineItemsAdminMixin:
    def clean_items(self):
        # the admin posts raw JSON; forms.JSONField has already parsed it
        return LineItemsField(required=False).clean(self.cleaned_data.get("items"))


class QuoteAdminForm(LineItemsAdminMixin, forms.ModelForm):
    class Meta:
        model = Quote
        fields = "__all__"

    def clean(self):
        cleaned = super().clean()
        owner = cleaned.get("owner")
        owner_id = owner.pk if owner else self.instance.owner_id
        customer = cleaned.get("customer")
        if customer and owner_id and customer.owner_id != owner_id:
            self.add_error("customer", "Customer belongs to another user")
        return cleaned


class InvoiceAdminForm(LineItemsAdminMixin, forms.ModelForm):
    class Meta:
        model = Invoice
        fields = "__all__"

    def clean(self):
        cleaned = super().clean()
        issue = cleaned.get("issue_date", self.instance.issue_date)
        due = cleaned.get("due_date", self.instance.due_date)
        if issue and due and due < issue:
            self.add_error("due_date", "Due date cannot be before the issue date")
        return cleaned
