"""
Turn stored rows into the shapes sent to API callers.

Every quote/invoice payload carries its effective status (never the
stored one), its totals, and for invoices the payment ledger. Customer
and invoice references are always expanded to one fixed shape.
"""
from .ledger import invoice_ledger
from .status import effective_invoice_status, effective_quote_status
from .totals import line_amount, round_money


def _iso(value):
    return value.isoformat() if value is not None else None


def customer_ref(customer):
    return {
        "id": customer.pk,
        "name": customer.name,
        "email": customer.email,
        "company": customer.company,
    }


def decorate_customer(customer):
    return {
        "id": customer.pk,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "company": customer.company,
        "address": customer.address,
        "created_at": _iso(customer.created_at),
        "updated_at": _iso(customer.updated_at),
    }


def decorate_items(items):
    return [
        {
            "description": item.get("description", ""),
            "quantity": item.get("quantity"),
            "unit_price": item.get("unit_price"),
            "tax_rate": item.get("tax_rate"),
            "amount": str(round_money(line_amount(item))),
        }
        for item in (items or [])
    ]


def decorate_quote(quote, today, converted=None):
    return {
        "id": quote.pk,
        "quote_number": quote.quote_number,
        "customer": customer_ref(quote.customer),
        "issue_date": _iso(quote.issue_date),
        "expiry_date": _iso(quote.expiry_date),
        "items": decorate_items(quote.items),
        "status": effective_quote_status(quote, today, converted=converted),
        "totals": quote.totals.as_dict(),
        "notes": quote.notes,
        "created_at": _iso(quote.created_at),
        "updated_at": _iso(quote.updated_at),
    }


def decorate_invoice(invoice, today, payments=None):
    return {
        "id": invoice.pk,
        "invoice_number": invoice.invoice_number,
        "customer": customer_ref(invoice.customer),
        "quote": {"id": invoice.quote_id,
                  "quote_number": invoice.quote.quote_number},
        "issue_date": _iso(invoice.issue_date),
        "due_date": _iso(invoice.due_date),
        "items": decorate_items(invoice.items),
        "status": effective_invoice_status(invoice, today),
        "totals": invoice.totals.as_dict(),
        "ledger": invoice_ledger(invoice, payments).as_dict(),
        "notes": invoice.notes,
        "created_at": _iso(invoice.created_at),
        "updated_at": _iso(invoice.updated_at),
    }


def decorate_payment(payment, today):
    invoice = payment.invoice
    return {
        "id": payment.pk,
        "payment_number": payment.payment_number,
        "invoice": {
            "id": invoice.pk,
            "invoice_number": invoice.invoice_number,
            "status": effective_invoice_status(invoice, today),
            "customer": customer_ref(invoice.customer),
        },
        "amount": str(round_money(payment.amount)),
        "payment_method": payment.payment_method,
        "status": payment.status,
        "payment_date": _iso(payment.payment_date),
        "notes": payment.notes,
        "created_at": _iso(payment.created_at),
    }
