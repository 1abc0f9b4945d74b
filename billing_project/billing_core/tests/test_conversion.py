import datetime

from django.test import TestCase

from ..exceptions import PolicyViolation
from ..models import Invoice
from ..services import lifecycle
from ..services.conversion import build_invoice_draft, can_convert
from .helpers import (NOW, TODAY, YESTERDAY, make_customer, make_quote,
                      make_user)


class QuoteConversionTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(self.user)

    def invoice_payload(self, quote, number="INV-001", **extra):
        payload = {
            "quote": quote.pk,
            "invoice_number": number,
            "issue_date": TODAY,
            "due_date": TODAY + datetime.timedelta(days=30),
        }
        payload.update(extra)
        return payload

    def test_only_accepted_quotes_convert(self):
        for status in ("draft", "sent", "declined"):
            quote = make_quote(self.user, self.customer,
                               number=f"Q-{status}", status=status)
            self.assertFalse(can_convert(quote, TODAY))
            with self.assertRaises(PolicyViolation):
                lifecycle.create_invoice(
                    self.user, self.invoice_payload(quote, f"INV-{status}"), now=NOW)

        # nothing was written
        self.assertEqual(Invoice.objects.count(), 0)

    def test_expired_accepted_quote_does_not_convert(self):
        quote = make_quote(self.user, self.customer, status="accepted",
                           expiry_date=YESTERDAY)
        with self.assertRaises(PolicyViolation):
            lifecycle.create_invoice(self.user, self.invoice_payload(quote), now=NOW)

    def test_accepted_quote_becomes_unpaid_invoice(self):
        quote = make_quote(self.user, self.customer, status="accepted")

        # a requested status is ignored
        data = lifecycle.create_invoice(
            self.user, self.invoice_payload(quote, status="paid"), now=NOW)

        self.assertEqual(data["status"], "unpaid")
        self.assertEqual(data["customer"]["id"], self.customer.pk)
        self.assertEqual(data["quote"]["id"], quote.pk)
        self.assertEqual(data["totals"],
                         {"subtotal": "500.00", "tax": "100.00", "total": "600.00"})
        self.assertEqual(data["ledger"]["remaining_balance"], "600.00")

        invoice = Invoice.objects.get(pk=data["id"])
        self.assertEqual(invoice.status, "unpaid")
        self.assertEqual(invoice.items, quote.items)

        # the quote now reads as converted
        self.assertEqual(lifecycle.get_quote(self.user, quote.pk, now=NOW)["status"],
                         "converted")

    def test_items_are_copied_by_value(self):
        quote = make_quote(self.user, self.customer, status="accepted")
        draft = build_invoice_draft(quote, self.invoice_payload(quote))

        quote.items[0]["unit_price"] = "999"
        self.assertEqual(draft["items"][0]["unit_price"], "100")

    def test_quote_edit_after_conversion_leaves_invoice_alone(self):
        quote = make_quote(self.user, self.customer, status="accepted")
        data = lifecycle.create_invoice(self.user, self.invoice_payload(quote), now=NOW)

        lifecycle.update_quote(self.user, quote.pk, {"notes": "Thanks!"}, now=NOW)
        invoice = Invoice.objects.get(pk=data["id"])
        self.assertEqual(invoice.items, quote.items)
        self.assertEqual(invoice.notes, "")

    def test_customer_must_match_quote(self):
        other = make_customer(self.user, name="Other Ltd")
        quote = make_quote(self.user, self.customer, status="accepted")
        with self.assertRaises(PolicyViolation):
            lifecycle.create_invoice(
                self.user, self.invoice_payload(quote, customer=other.pk), now=NOW)

        # naming the quote's own customer is fine
        data = lifecycle.create_invoice(
            self.user, self.invoice_payload(quote, customer=self.customer.pk), now=NOW)
        self.assertEqual(data["customer"]["id"], self.customer.pk)

    def test_quote_converts_only_once(self):
        quote = make_quote(self.user, self.customer, status="accepted")
        lifecycle.create_invoice(self.user, self.invoice_payload(quote), now=NOW)
        with self.assertRaises(PolicyViolation):
            lifecycle.create_invoice(
                self.user, self.invoice_payload(quote, "INV-002"), now=NOW)
        self.assertEqual(Invoice.objects.filter(quote=quote).count(), 1)
