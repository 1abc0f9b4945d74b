import json
from decimal import Decimal

import pytest
from django.test import RequestFactory, TestCase

from billing_core.exceptions import EntityNotFound
from billing_core.models import Invoice, Quote
from billing_core.services import lifecycle
from billing_core.views import invoice_list

from .helpers import (NOW, make_customer, make_invoice, make_payment,
                      make_quote, make_user)


class OwnerIsolationManagerTests(TestCase):
    def setUp(self):
        self.alice = make_user("alice@example.com")
        self.bob = make_user("bob@example.com")

        # one accepted quote and invoice per user
        self.quote_a = make_quote(self.alice, make_customer(self.alice),
                                  number="A-1", status="accepted")
        self.quote_b = make_quote(self.bob, make_customer(self.bob),
                                  number="B-1", status="accepted")
        self.inv_a = make_invoice(self.alice, self.quote_a, number="A-1")
        self.inv_b = make_invoice(self.bob, self.quote_b, number="B-1")

    def test_for_owner_returns_only_that_owners_objects(self):
        self.assertListEqual(
            list(Invoice.objects.for_owner(self.alice)
                 .order_by("id").values_list("pk", flat=True)),
            [self.inv_a.pk],
        )
        self.assertListEqual(
            list(Invoice.objects.for_owner(self.bob)
                 .order_by("id").values_list("pk", flat=True)),
            [self.inv_b.pk],
        )

    def test_other_owners_rows_look_missing(self):
        with self.assertRaises(EntityNotFound):
            Invoice.objects.get_owned(self.alice, self.inv_b.pk)
        with self.assertRaises(EntityNotFound):
            lifecycle.get_quote(self.alice, self.quote_b.pk, now=NOW)
        with self.assertRaises(EntityNotFound):
            lifecycle.update_invoice(
                self.alice, self.inv_b.pk, {"status": "paid"}, now=NOW)
        with self.assertRaises(EntityNotFound):
            lifecycle.delete_quote(self.alice, self.quote_b.pk)

        self.inv_b.refresh_from_db()
        self.assertEqual(self.inv_b.status, "unpaid")
        self.assertTrue(Quote.objects.filter(pk=self.quote_b.pk).exists())

    def test_cannot_reference_other_owners_rows(self):
        bob_customer = self.quote_b.customer
        with self.assertRaises(EntityNotFound):
            lifecycle.create_quote(self.alice, {
                "customer": bob_customer.pk,
                "quote_number": "A-2",
                "issue_date": NOW.date(),
            }, now=NOW)
        with self.assertRaises(EntityNotFound):
            lifecycle.create_invoice(self.alice, {
                "quote": self.quote_b.pk,
                "invoice_number": "A-2",
                "issue_date": NOW.date(),
                "due_date": NOW.date(),
            }, now=NOW)
        with self.assertRaises(EntityNotFound):
            lifecycle.create_payment(self.alice, {
                "invoice": self.inv_b.pk,
                "amount": Decimal("5.00"),
                "payment_method": "cash",
            }, now=NOW)

    def test_dashboard_counts_only_own_rows(self):
        make_payment(self.bob, self.inv_b, Decimal("1.00"), "PAY-B")
        summary = lifecycle.dashboard_summary(self.alice, now=NOW)
        self.assertEqual(summary["invoices"]["count"], 1)
        self.assertEqual(summary["payments"]["count"], 0)


@pytest.mark.django_db
def test_invoice_list_returns_only_owner_data():
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    make_invoice(alice, make_quote(alice, make_customer(alice, "Alice's client"),
                                   status="accepted"), number="A-INV")
    make_invoice(bob, make_quote(bob, make_customer(bob, "Bob's client"),
                                 status="accepted"), number="B-INV")

    # Bypass client & call view with a RequestFactory
    request = RequestFactory().get("/api/invoices/")
    request.user = alice

    response = invoice_list(request)
    data = json.loads(response.content)

    numbers = [d["invoice_number"] for d in data]
    assert "A-INV" in numbers
    assert "B-INV" not in numbers
