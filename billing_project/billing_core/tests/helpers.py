import copy
import datetime

from django.contrib.auth import get_user_model

from ..models import Customer, Invoice, Payment, Quote

# Fixed clock shared by the tests: midday UTC on 16 Jan 2026
NOW = datetime.datetime(2026, 1, 16, 12, 0, tzinfo=datetime.timezone.utc)
TODAY = NOW.date()
YESTERDAY = TODAY - datetime.timedelta(days=1)
TOMORROW = TODAY + datetime.timedelta(days=1)

ITEMS = [{"description": "Consulting day", "quantity": "5",
          "unit_price": "100", "tax_rate": "20"}]


def make_user(email="alice@example.com", password="password123"):
    return get_user_model().objects.create_user(
        username=email, email=email, password=password, first_name="Test")


def make_customer(owner, name="ACME"):
    return Customer.objects.create(owner=owner, name=name)


def make_quote(owner, customer, number="Q-001", status="draft",
               expiry_date=TOMORROW, items=None):
    return Quote.objects.create(
        owner=owner,
        customer=customer,
        quote_number=number,
        issue_date=TODAY - datetime.timedelta(days=10),
        expiry_date=expiry_date,
        items=copy.deepcopy(ITEMS) if items is None else items,
        status=status,
    )


def make_invoice(owner, quote, number="INV-001", status="unpaid",
                 due_date=TOMORROW):
    return Invoice.objects.create(
        owner=owner,
        customer=quote.customer,
        quote=quote,
        invoice_number=number,
        issue_date=TODAY - datetime.timedelta(days=5),
        due_date=due_date,
        items=copy.deepcopy(quote.items),
        status=status,
    )


def make_payment(owner, invoice, amount, number, status="completed"):
    return Payment.objects.create(
        owner=owner,
        invoice=invoice,
        payment_number=number,
        amount=amount,
        payment_method="card",
        status=status,
    )
