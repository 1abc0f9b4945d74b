from decimal import Decimal, InvalidOperation

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError

from .models.invoice import INV_STATUS_CHOICES
from .models.payment import PAYMENT_METHOD_CHOICES, PAYMENT_STATUS_CHOICES
from .models.quote import QUOTE_STATUS_CHOICES

QUOTE_STATUSES = {value for value, _ in QUOTE_STATUS_CHOICES}
INVOICE_STATUSES = {value for value, _ in INV_STATUS_CHOICES}

# Line item caps; their product fits the 18-digit money columns
MAX_QUANTITY = Decimal("1000000")
MAX_UNIT_PRICE = Decimal("1000000000")


# -----------------------------
# Custom fields
# ----------------------------
class ReferenceField(forms.Field):
    """
    Accept a related entity as a bare id or as an expanded object
    ({"id": 7, ...} or {"_id": 7, ...}) and hand back the integer id.
    """

    default_error_messages = {"invalid": "Enter a valid reference."}

    def to_python(self, value):
        if value in self.empty_values:
            return None
        if isinstance(value, dict):
            value = value.get("id", value.get("_id"))
        if isinstance(value, bool):
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        try:
            ref = int(str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        if ref <= 0:
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        return ref


def _number(raw, label, index):
    if raw is None or isinstance(raw, bool) or raw == "":
        raise ValidationError(f"Item {index}: {label} is required")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Item {index}: {label} must be a number")
    if not value.is_finite():
        raise ValidationError(f"Item {index}: {label} must be a number")
    return value


class LineItemsField(forms.Field):
    """
    A JSON list of line items, normalised to
    {"description", "quantity", "unit_price", "tax_rate"} with the numbers
    kept as decimal strings.
    """

    def to_python(self, value):
        if value in (None, ""):
            return []
        if not isinstance(value, list):
            raise ValidationError("Items must be a list")
        return value

    def validate(self, value):
        if self.required and value is None:
            raise ValidationError(self.error_messages["required"], code="required")

    def clean(self, value):
        items = super().clean(value)
        default_rate = getattr(settings, "BILLING_DEFAULT_TAX_RATE", 20)
        cleaned = []
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                raise ValidationError(f"Item {index} must be an object")

            description = str(item.get("description") or "").strip()
            if not description:
                raise ValidationError(f"Item {index}: description is required")

            # accept the camelCase names the dashboard sends
            quantity = _number(item.get("quantity"), "quantity", index)
            unit_price = _number(
                item.get("unit_price", item.get("unitPrice")), "unit price", index)
            raw_rate = item.get("tax_rate", item.get("taxRate"))
            tax_rate = (Decimal(default_rate) if raw_rate in (None, "")
                        else _number(raw_rate, "tax rate", index))

            if quantity <= 0:
                raise ValidationError(f"Item {index}: quantity must be greater than 0")
            if quantity > MAX_QUANTITY:
                raise ValidationError(
                    f"Item {index}: quantity must not exceed {MAX_QUANTITY}")
            if unit_price < 0:
                raise ValidationError(f"Item {index}: unit price must be >= 0")
            if unit_price > MAX_UNIT_PRICE:
                raise ValidationError(
                    f"Item {index}: unit price must not exceed {MAX_UNIT_PRICE}")
            if not Decimal("0") <= tax_rate <= Decimal("100"):
                raise ValidationError(f"Item {index}: tax rate must be between 0 and 100")

            cleaned.append({
                "description": description,
                "quantity": str(quantity),
                "unit_price": str(unit_price),
                "tax_rate": str(tax_rate),
            })
        return cleaned


# -----------------------------
# Payload forms
# ----------------------------
class PayloadForm(forms.Form):
    """
    Base for API payload forms.
    With partial=True (PATCH/PUT) every field becomes optional and only
    the keys actually sent are returned by payload().
    """

    def __init__(self, data=None, *args, partial=False, **kwargs):
        super().__init__(data, *args, **kwargs)
        self.partial = partial
        if partial:
            for field in self.fields.values():
                field.required = False

    def payload(self):
        if not self.partial:
            return dict(self.cleaned_data)
        sent = set(self.data.keys())
        return {k: v for k, v in self.cleaned_data.items() if k in sent}


class CustomerForm(PayloadForm):
    name = forms.CharField(max_length=200)
    email = forms.EmailField(required=False)
    phone = forms.CharField(max_length=32, required=False)
    company = forms.CharField(max_length=200, required=False)
    address = forms.CharField(required=False)


class QuoteForm(PayloadForm):
    customer = ReferenceField()
    quote_number = forms.CharField(max_length=64)
    issue_date = forms.DateField()
    expiry_date = forms.DateField(required=False)
    items = LineItemsField(required=False)
    status = forms.CharField(required=False)
    notes = forms.CharField(required=False)

    def clean_status(self):
        status = (self.cleaned_data.get("status") or "").strip().lower()
        if status in QUOTE_STATUSES:
            return status
        # an edit must name a storable status outright
        if self.partial and "status" in self.data:
            raise ValidationError(
                f"Status must be one of: {', '.join(sorted(QUOTE_STATUSES))}")
        return "draft"


class InvoiceForm(PayloadForm):
    quote = ReferenceField()
    customer = ReferenceField(required=False)
    invoice_number = forms.CharField(max_length=64)
    issue_date = forms.DateField()
    due_date = forms.DateField()
    items = LineItemsField(required=False)
    status = forms.CharField(required=False)
    notes = forms.CharField(required=False)

    def clean_status(self):
        status = (self.cleaned_data.get("status") or "").strip().lower()
        if self.partial and "status" in self.data and status not in INVOICE_STATUSES:
            raise ValidationError("Status must be either unpaid or paid")
        return status

    def clean(self):
        cleaned = super().clean()
        issue, due = cleaned.get("issue_date"), cleaned.get("due_date")
        if issue and due and due < issue:
            self.add_error("due_date", "Due date cannot be before the issue date")
        return cleaned


class PaymentForm(PayloadForm):
    invoice = ReferenceField()
    payment_number = forms.CharField(max_length=64, required=False)
    amount = forms.DecimalField(
        max_digits=18, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = forms.ChoiceField(choices=PAYMENT_METHOD_CHOICES)
    status = forms.ChoiceField(choices=PAYMENT_STATUS_CHOICES, required=False)
    payment_date = forms.DateTimeField(required=False)
    notes = forms.CharField(required=False)

    def clean_status(self):
        return self.cleaned_data.get("status") or "completed"


def validated(form_class, data, partial=False):
    """Run `form_class` over a JSON body and return its payload or raise."""
    form = form_class(data, partial=partial)
    if not form.is_valid():
        raise ValidationError(
            {field: [str(e) for e in errors] for field, errors in form.errors.items()}
        )
    return form.payload()
