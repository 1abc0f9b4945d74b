import datetime
import json
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from ..exceptions import EntityNotFound, NumberConflict, PolicyViolation
from ..models import AuditLog, Invoice, Payment
from ..services import lifecycle
from .helpers import (NOW, TODAY, YESTERDAY, make_customer, make_invoice,
                      make_payment, make_quote, make_user)


class InvoiceLifecycleTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(self.user)
        self.quote = make_quote(self.user, self.customer, status="accepted")

    def test_full_flow_payment_does_not_mark_paid(self):
        data = lifecycle.create_invoice(self.user, {
            "quote": self.quote.pk,
            "invoice_number": "INV-001",
            "issue_date": TODAY,
            "due_date": TODAY + datetime.timedelta(days=14),
        }, now=NOW)
        invoice_id = data["id"]

        lifecycle.create_payment(self.user, {
            "invoice": invoice_id,
            "amount": Decimal("600.00"),
            "payment_method": "bank_transfer",
        }, now=NOW)

        data = lifecycle.get_invoice(self.user, invoice_id, now=NOW)
        self.assertEqual(data["ledger"]["total_paid"], "600.00")
        self.assertEqual(data["ledger"]["remaining_balance"], "0.00")
        self.assertEqual(data["ledger"]["settlement"], "settled")
        # stored status only changes on an explicit update
        self.assertEqual(data["status"], "unpaid")

        data = lifecycle.update_invoice(
            self.user, invoice_id, {"status": "paid"}, now=NOW)
        self.assertEqual(data["status"], "paid")
        self.assertEqual(Invoice.objects.get(pk=invoice_id).status, "paid")

    def test_overdue_is_derived_not_stored(self):
        invoice = make_invoice(self.user, self.quote, due_date=YESTERDAY)
        data = lifecycle.get_invoice(self.user, invoice.pk, now=NOW)
        self.assertEqual(data["status"], "overdue")

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "unpaid")

        # paying it off and marking paid clears overdue
        lifecycle.update_invoice(self.user, invoice.pk, {"status": "paid"}, now=NOW)
        data = lifecycle.get_invoice(self.user, invoice.pk, now=NOW)
        self.assertEqual(data["status"], "paid")

    def test_paid_invoice_items_are_frozen(self):
        invoice = make_invoice(self.user, self.quote, status="paid")
        with self.assertRaises(PolicyViolation):
            lifecycle.update_invoice(self.user, invoice.pk, {"items": []}, now=NOW)

        # dates and notes may still change
        data = lifecycle.update_invoice(
            self.user, invoice.pk, {"notes": "Paid by wire"}, now=NOW)
        self.assertEqual(data["notes"], "Paid by wire")

    def test_unpaid_invoice_items_can_be_edited(self):
        invoice = make_invoice(self.user, self.quote)
        data = lifecycle.update_invoice(self.user, invoice.pk, {"items": [
            {"description": "Half day", "quantity": "1",
             "unit_price": "250", "tax_rate": "0"},
        ]}, now=NOW)
        self.assertEqual(data["totals"]["total"], "250.00")

    def test_invoice_cannot_be_repointed(self):
        invoice = make_invoice(self.user, self.quote)
        other_quote = make_quote(self.user, self.customer, number="Q-002",
                                 status="accepted")
        with self.assertRaises(PolicyViolation):
            lifecycle.update_invoice(
                self.user, invoice.pk, {"quote": other_quote.pk}, now=NOW)
        with self.assertRaises(PolicyViolation):
            lifecycle.update_invoice(
                self.user, invoice.pk, {"invoice_number": "INV-XYZ"}, now=NOW)

    def test_due_date_before_issue_date_rejected(self):
        invoice = make_invoice(self.user, self.quote)
        with self.assertRaises(PolicyViolation):
            lifecycle.update_invoice(self.user, invoice.pk, {
                "due_date": invoice.issue_date - datetime.timedelta(days=1),
            }, now=NOW)

    def test_duplicate_invoice_number_conflicts(self):
        make_invoice(self.user, self.quote)
        second = make_quote(self.user, self.customer, number="Q-002",
                            status="accepted")
        with self.assertRaises(NumberConflict):
            lifecycle.create_invoice(self.user, {
                "quote": second.pk,
                "invoice_number": "INV-001",
                "issue_date": TODAY,
                "due_date": TODAY,
            }, now=NOW)

    def test_invoice_with_payments_cannot_be_deleted(self):
        invoice = make_invoice(self.user, self.quote)
        payment = make_payment(self.user, invoice, Decimal("10.00"), "PAY-1")

        with self.assertRaises(PolicyViolation):
            lifecycle.delete_invoice(self.user, invoice.pk)
        self.assertTrue(Invoice.objects.filter(pk=invoice.pk).exists())
        self.assertTrue(Payment.objects.filter(pk=payment.pk).exists())

    def test_delete_invoice_frees_quote(self):
        invoice_id = make_invoice(self.user, self.quote).pk
        lifecycle.delete_invoice(self.user, invoice_id)

        with self.assertRaises(EntityNotFound):
            lifecycle.get_invoice(self.user, invoice_id, now=NOW)
        self.assertEqual(
            lifecycle.get_quote(self.user, self.quote.pk, now=NOW)["status"],
            "accepted")

    def test_list_prefetches_ledger(self):
        invoice = make_invoice(self.user, self.quote)
        make_payment(self.user, invoice, Decimal("100.00"), "PAY-1")
        make_payment(self.user, invoice, Decimal("900.00"), "PAY-2", status="failed")

        with self.assertNumQueries(2):
            rows = lifecycle.list_invoices(self.user, now=NOW)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["ledger"]["total_paid"], "100.00")
        self.assertEqual(rows[0]["ledger"]["remaining_balance"], "500.00")

    def test_dashboard_summary(self):
        make_invoice(self.user, self.quote, due_date=YESTERDAY)
        make_quote(self.user, self.customer, number="Q-002", status="sent")

        summary = lifecycle.dashboard_summary(self.user, now=NOW)
        self.assertEqual(summary["customers"]["count"], 1)
        self.assertEqual(summary["quotes"]["count"], 2)
        self.assertEqual(summary["quotes"]["by_status"],
                         {"converted": 1, "sent": 1})
        self.assertEqual(summary["invoices"]["by_status"], {"overdue": 1})
        self.assertEqual(summary["invoices"]["outstanding"], "600.00")
        self.assertEqual(summary["payments"]["count"], 0)

    def test_overpaid_invoice_does_not_offset_outstanding(self):
        overpaid = make_invoice(self.user, self.quote)
        make_payment(self.user, overpaid, Decimal("1000.00"), "PAY-1")
        other_quote = make_quote(self.user, self.customer, number="Q-002",
                                 status="accepted")
        make_invoice(self.user, other_quote, number="INV-002")

        summary = lifecycle.dashboard_summary(self.user, now=NOW)
        self.assertEqual(summary["invoices"]["outstanding"], "600.00")


class InvoiceAdminTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.customer = make_customer(self.user)
        self.quote = make_quote(self.user, self.customer, status="accepted")
        root = get_user_model().objects.create_superuser(
            username="root", email="root@example.com", password="password123")
        self.client.force_login(root)

    def change_form(self, invoice, **extra):
        data = {
            "issue_date": invoice.issue_date.isoformat(),
            "due_date": invoice.due_date.isoformat(),
            "items": json.dumps(invoice.items),
            "status": invoice.status,
            "notes": invoice.notes,
        }
        data.update(extra)
        return data

    def test_invoices_cannot_be_added_in_admin(self):
        url = reverse("admin:billing_core_invoice_add")
        self.assertEqual(self.client.get(url).status_code, 403)

        resp = self.client.post(url, {
            "owner": self.user.pk,
            "customer": self.customer.pk,
            "quote": self.quote.pk,
            "invoice_number": "INV-ADM",
            "issue_date": TODAY.isoformat(),
            "due_date": TODAY.isoformat(),
            "items": "[]",
            "status": "unpaid",
            "notes": "",
        })
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Invoice.objects.exists())

    def test_admin_change_is_audited(self):
        invoice = make_invoice(self.user, self.quote)
        resp = self.client.post(
            reverse("admin:billing_core_invoice_change", args=[invoice.pk]),
            self.change_form(invoice, status="paid"))
        self.assertEqual(resp.status_code, 302)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "paid")
        log = AuditLog.objects.get(action="update", object_type="Invoice")
        self.assertEqual(log.object_id, str(invoice.pk))
        self.assertEqual(log.changes, {"status": "paid"})

    def test_admin_rejects_due_date_before_issue_date(self):
        invoice = make_invoice(self.user, self.quote)
        resp = self.client.post(
            reverse("admin:billing_core_invoice_change", args=[invoice.pk]),
            self.change_form(invoice, due_date="2026-01-01"))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("due_date", resp.context["adminform"].form.errors)

        invoice.refresh_from_db()
        self.assertEqual(invoice.due_date, datetime.date(2026, 1, 17))
        self.assertFalse(AuditLog.objects.filter(action="update").exists())

    def test_admin_items_are_validated(self):
        invoice = make_invoice(self.user, self.quote)
        bad_items = json.dumps([{"description": "x", "quantity": "1e30",
                                 "unit_price": "1"}])
        resp = self.client.post(
            reverse("admin:billing_core_invoice_change", args=[invoice.pk]),
            self.change_form(invoice, items=bad_items))
        self.assertEqual(resp.status_code, 200)

        invoice.refresh_from_db()
        self.assertEqual(len(invoice.items), 1)
        self.assertEqual(invoice.items[0]["quantity"], "5")
