"""
Reads and writes for customers, quotes, invoices and payments.

Every function takes the requesting user first and scopes every lookup
with for_owner(), so another user's rows are indistinguishable from
missing ones. Payloads arrive already validated (see forms.py); each
write is a single row save wrapped with its audit entry in one atomic
block, and every precondition is checked before anything is saved.

`now` is injectable for tests; it is resolved once per call.
"""
import logging
import uuid
from collections import Counter

from django.db import IntegrityError, transaction
from django.db.models import Prefetch

from ..exceptions import NumberConflict, PolicyViolation
from ..models import Customer, Invoice, Payment, Quote
from .audit_helper import log_action
from .conversion import build_invoice_draft, ensure_convertible
from .decorate import (decorate_customer, decorate_invoice, decorate_payment,
                       decorate_quote)
from .ledger import invoice_ledger
from .status import (INVOICE_PAID, effective_invoice_status,
                     effective_quote_status, today_in_reference_zone)
from .totals import ZERO

logger = logging.getLogger(__name__)


def _ensure_unique(model, owner, field, value, exclude_pk=None):
    qs = model.objects.for_owner(owner).filter(**{field: value})
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise NumberConflict(field, value)


def _save(instance, number_field):
    # a concurrent insert can still win the race past _ensure_unique
    try:
        with transaction.atomic():
            instance.save()
    except IntegrityError:
        raise NumberConflict(number_field, getattr(instance, number_field))


def _converted_ids(owner, quote_ids=None):
    qs = Invoice.objects.for_owner(owner)
    if quote_ids is not None:
        qs = qs.filter(quote_id__in=quote_ids)
    return set(qs.values_list("quote_id", flat=True))


# ----------------------------
# Customers
# ----------------------------
def list_customers(owner):
    return [decorate_customer(c)
            for c in Customer.objects.for_owner(owner).newest_first()]


def get_customer(owner, pk):
    return decorate_customer(Customer.objects.get_owned(owner, pk))


def create_customer(owner, data):
    with transaction.atomic():
        customer = Customer(owner=owner, **data)
        customer.save()
        log_action(action="create", instance=customer,
                   changes={"name": customer.name})
        result = decorate_customer(customer)
    logger.info("customer %s created for user %s", customer.pk, owner.pk)
    return result


def update_customer(owner, pk, data):
    with transaction.atomic():
        customer = Customer.objects.get_owned(owner, pk)
        for field, value in data.items():
            setattr(customer, field, value)
        customer.save()
        log_action(action="update", instance=customer,
                   changes={k: str(v) for k, v in data.items()})
        return decorate_customer(customer)


def delete_customer(owner, pk):
    with transaction.atomic():
        customer = Customer.objects.get_owned(owner, pk)
        if customer.quotes.exists() or customer.invoices.exists():
            raise PolicyViolation(
                "Cannot delete a customer with quotes or invoices.")
        customer_id = customer.pk
        customer.delete()
        log_action(action="delete", instance=customer, owner=owner,
                   object_id=customer_id)
    logger.info("customer %s deleted for user %s", customer_id, owner.pk)


# ----------------------------
# Quotes
# ----------------------------
def list_quotes(owner, now=None):
    today = today_in_reference_zone(now)
    quotes = list(Quote.objects.for_owner(owner)
                  .select_related("customer").newest_first())
    converted = _converted_ids(owner, [q.pk for q in quotes])
    return [decorate_quote(q, today, converted=q.pk in converted)
            for q in quotes]


def get_quote(owner, pk, now=None):
    quote = Quote.objects.get_owned(owner, pk)
    return decorate_quote(quote, today_in_reference_zone(now))


def create_quote(owner, data, now=None):
    # customer must exist under the same owner
    customer = Customer.objects.get_owned(owner, data["customer"])
    _ensure_unique(Quote, owner, "quote_number", data["quote_number"])

    quote = Quote(
        owner=owner,
        customer=customer,
        quote_number=data["quote_number"],
        issue_date=data["issue_date"],
        expiry_date=data.get("expiry_date"),
        items=data.get("items") or [],
        status=data.get("status") or "draft",
        notes=data.get("notes") or "",
    )
    with transaction.atomic():
        _save(quote, "quote_number")
        log_action(action="create", instance=quote,
                   changes={"quote_number": quote.quote_number,
                            "status": quote.status,
                            "total": str(quote.totals.total)})
        result = decorate_quote(quote, today_in_reference_zone(now), converted=False)
    logger.info("quote %s created for user %s", quote.quote_number, owner.pk)
    return result


def update_quote(owner, pk, data, now=None):
    today = today_in_reference_zone(now)
    with transaction.atomic():
        quote = Quote.objects.get_owned(owner, pk)
        converted = quote.is_converted()

        # a converted quote is frozen: no status or item changes
        if converted and (
                data.get("status", quote.status) != quote.status
                or data.get("items", quote.items) != quote.items):
            raise PolicyViolation(
                "Quote has been converted to an invoice and can't change "
                "status or items.")
        if "quote_number" in data and data["quote_number"] != quote.quote_number:
            raise PolicyViolation("Quote number cannot be changed.")
        if "customer" in data:
            quote.customer = Customer.objects.get_owned(owner, data["customer"])

        for field in ("issue_date", "expiry_date", "items", "status", "notes"):
            if field in data:
                setattr(quote, field, data[field])
        quote.save()
        log_action(action="update", instance=quote,
                   changes={k: str(v) for k, v in data.items()})
        # decorated inside the block so a failure here undoes the write
        return decorate_quote(quote, today, converted=converted)


def delete_quote(owner, pk):
    with transaction.atomic():
        quote = Quote.objects.get_owned(owner, pk)
        # invoices must always point at their quote
        if quote.is_converted():
            raise PolicyViolation(
                "Cannot delete a quote that has been converted to an invoice.")
        quote_id = quote.pk
        quote.delete()
        log_action(action="delete", instance=quote, owner=owner,
                   object_id=quote_id,
                   changes={"quote_number": quote.quote_number})
    logger.info("quote %s deleted for user %s", quote_id, owner.pk)


# ----------------------------
# Invoices
# ----------------------------
def _invoices(owner):
    return (Invoice.objects.for_owner(owner)
            .select_related("customer", "quote")
            .prefetch_related(Prefetch("payments", to_attr="payment_rows")))


def list_invoices(owner, now=None):
    today = today_in_reference_zone(now)
    return [decorate_invoice(inv, today, inv.payment_rows)
            for inv in _invoices(owner).newest_first()]


def get_invoice(owner, pk, now=None):
    invoice = Invoice.objects.get_owned(owner, pk)
    return decorate_invoice(invoice, today_in_reference_zone(now))


def create_invoice(owner, data, now=None):
    """
    Raise an invoice from an accepted quote.
    Fails with PolicyViolation before any write when the quote isn't
    accepted (draft, sent, declined, expired or already converted).
    """
    today = today_in_reference_zone(now)
    quote = Quote.objects.get_owned(owner, data["quote"])
    ensure_convertible(quote, today)
    draft = build_invoice_draft(quote, data)
    _ensure_unique(Invoice, owner, "invoice_number", draft["invoice_number"])

    invoice = Invoice(**draft)
    with transaction.atomic():
        _save(invoice, "invoice_number")
        log_action(action="create", instance=invoice,
                   changes={"invoice_number": invoice.invoice_number,
                            "quote_id": quote.pk,
                            "total": str(invoice.totals.total)})
        result = decorate_invoice(invoice, today, payments=[])
    logger.info("invoice %s raised from quote %s for user %s",
                invoice.invoice_number, quote.quote_number, owner.pk)
    return result


def update_invoice(owner, pk, data, now=None):
    today = today_in_reference_zone(now)
    with transaction.atomic():
        invoice = Invoice.objects.get_owned(owner, pk)

        if "quote" in data and data["quote"] != invoice.quote_id:
            raise PolicyViolation("An invoice cannot be moved to another quote.")
        if "customer" in data and data["customer"] != invoice.customer_id:
            raise PolicyViolation(
                "An invoice cannot be moved to another customer.")
        if ("invoice_number" in data
                and data["invoice_number"] != invoice.invoice_number):
            raise PolicyViolation("Invoice number cannot be changed.")
        # a paid invoice keeps the lines it was settled against
        if "items" in data and invoice.status == INVOICE_PAID:
            raise PolicyViolation("Items of a paid invoice cannot be edited.")

        for field in ("issue_date", "due_date", "items", "status", "notes"):
            if field in data:
                setattr(invoice, field, data[field])
        if (invoice.due_date and invoice.issue_date
                and invoice.due_date < invoice.issue_date):
            raise PolicyViolation("Due date cannot be before the issue date.")
        invoice.save()
        log_action(action="update", instance=invoice,
                   changes={k: str(v) for k, v in data.items()})
        return decorate_invoice(invoice, today)


def delete_invoice(owner, pk):
    with transaction.atomic():
        invoice = Invoice.objects.get_owned(owner, pk)
        # payments are never removed along with their invoice
        if invoice.payments.exists():
            raise PolicyViolation(
                "Cannot delete an invoice with recorded payments.")
        invoice_id = invoice.pk
        invoice.delete()
        log_action(action="delete", instance=invoice, owner=owner,
                   object_id=invoice_id,
                   changes={"invoice_number": invoice.invoice_number})
    logger.info("invoice %s deleted for user %s", invoice_id, owner.pk)


# ----------------------------
# Payments
# ----------------------------
def _payments(owner):
    return (Payment.objects.for_owner(owner)
            .select_related("invoice", "invoice__customer"))


def list_payments(owner, now=None):
    today = today_in_reference_zone(now)
    rows = _payments(owner).order_by("-payment_date", "-pk")
    return [decorate_payment(p, today) for p in rows]


def get_payment(owner, pk, now=None):
    payment = Payment.objects.get_owned(owner, pk)
    return decorate_payment(payment, today_in_reference_zone(now))


def create_payment(owner, data, now=None):
    """
    Record a payment against one of the owner's invoices.
    Overpayment is allowed and the invoice's stored status is left alone;
    marking it paid is a separate, explicit update.
    """
    invoice = Invoice.objects.get_owned(owner, data["invoice"])
    number = data.get("payment_number") or f"PAY-{uuid.uuid4().hex[:10].upper()}"
    _ensure_unique(Payment, owner, "payment_number", number)

    payment = Payment(
        owner=owner,
        invoice=invoice,
        payment_number=number,
        amount=data["amount"],
        payment_method=data["payment_method"],
        status=data.get("status") or "completed",
        notes=data.get("notes") or "",
    )
    if data.get("payment_date"):
        payment.payment_date = data["payment_date"]

    with transaction.atomic():
        _save(payment, "payment_number")
        log_action(action="create", instance=payment,
                   changes={"invoice_id": invoice.pk,
                            "amount": str(payment.amount),
                            "status": payment.status})
        result = decorate_payment(payment, today_in_reference_zone(now))
    logger.info("payment %s of %s recorded on invoice %s for user %s",
                payment.payment_number, payment.amount,
                invoice.invoice_number, owner.pk)
    return result


def delete_payment(owner, pk):
    with transaction.atomic():
        payment = Payment.objects.get_owned(owner, pk)
        payment_id = payment.pk
        payment.delete()
        log_action(action="delete", instance=payment, owner=owner,
                   object_id=payment_id,
                   changes={"invoice_id": payment.invoice_id,
                            "amount": str(payment.amount)})
    logger.info("payment %s deleted for user %s", payment_id, owner.pk)


# ----------------------------
# Dashboard
# ----------------------------
def dashboard_summary(owner, now=None):
    today = today_in_reference_zone(now)

    quotes = list(Quote.objects.for_owner(owner))
    converted = _converted_ids(owner)
    quote_counts = Counter(
        effective_quote_status(q, today, converted=q.pk in converted)
        for q in quotes)

    invoice_counts = Counter()
    outstanding = ZERO
    for inv in _invoices(owner):
        status = effective_invoice_status(inv, today)
        invoice_counts[status] += 1
        if status != INVOICE_PAID:
            balance = invoice_ledger(inv, inv.payment_rows).remaining_balance
            # an overpaid invoice owes nothing; it never offsets another's debt
            outstanding += max(balance, ZERO)

    return {
        "customers": {"count": Customer.objects.for_owner(owner).count()},
        "quotes": {"count": len(quotes), "by_status": dict(quote_counts)},
        "invoices": {
            "count": sum(invoice_counts.values()),
            "by_status": dict(invoice_counts),
            "outstanding": str(outstanding),
        },
        "payments": {"count": Payment.objects.for_owner(owner).count()},
    }
