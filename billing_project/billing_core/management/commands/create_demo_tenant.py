import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from billing_core.models import Invoice, Quote
from billing_core.services import lifecycle

User = get_user_model()


class Command(BaseCommand):
    help = (
        "Create a demo user with a customer, an accepted quote, the invoice "
        "raised from it and a first payment."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--email", default="demo@example.com",
            help="Login e-mail of the demo user.",
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )
        parser.add_argument(
            "--customer-name", default="Acme Ltd",
            help="Name of the demo customer.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        # Read arguments from add_arguments()
        email = options["email"].strip().lower()
        password = options["password"]
        customer_name = options["customer_name"]

        # 1. Create user (accounts are keyed by e-mail)
        user, created = User.objects.get_or_create(
            username=email, defaults={"email": email, "first_name": "Demo"}
        )
        if created:  # if user newly created
            user.set_password(password)
            user.save()
        self.stdout.write(
            self.style.SUCCESS(f"Using user: {user.username} (pw={password})")
        )

        # 2. Create customer
        customer = lifecycle.create_customer(
            user, {"name": customer_name, "email": "billing@acme.example"})
        self.stdout.write(self.style.SUCCESS(f"Created customer: {customer['name']}"))

        # Numbers only need to be unique per user
        def unique_number(model, field, base, max_tries=100):
            number = base
            i = 1
            while model.objects.for_owner(user).filter(**{field: number}).exists():
                number = f"{base}-{i}"  # Example: "Q-DEMO" → "Q-DEMO-1" → "Q-DEMO-2"
                i += 1
                if i > max_tries:
                    raise RuntimeError(f"Couldn't generate unique {field} from {base}")
            return number

        # 3. Quote: 5 × 100 at 20% tax → 500 + 100 = 600
        today = timezone.localdate()
        quote = lifecycle.create_quote(user, {
            "customer": customer["id"],
            "quote_number": unique_number(Quote, "quote_number", "Q-DEMO"),
            "issue_date": today,
            "expiry_date": today + datetime.timedelta(days=30),
            "items": [{"description": "Consulting day", "quantity": "5",
                       "unit_price": "100", "tax_rate": "20"}],
            "status": "sent",
            "notes": "Demo quote",
        })
        lifecycle.update_quote(user, quote["id"], {"status": "accepted"})
        self.stdout.write(self.style.SUCCESS(
            f"Created accepted quote: {quote['quote_number']} "
            f"(total {quote['totals']['total']})"))

        # 4. Invoice raised from the quote
        invoice = lifecycle.create_invoice(user, {
            "quote": quote["id"],
            "invoice_number": unique_number(Invoice, "invoice_number", "INV-DEMO"),
            "issue_date": today,
            "due_date": today + datetime.timedelta(days=14),
            "notes": "Demo invoice",
        })
        self.stdout.write(
            self.style.SUCCESS(f"Created invoice: {invoice['invoice_number']}")
        )

        # 5. Partial payment
        payment = lifecycle.create_payment(user, {
            "invoice": invoice["id"],
            "amount": Decimal("250.00"),
            "payment_method": "bank_transfer",
            "status": "completed",
        })
        self.stdout.write(self.style.SUCCESS(
            f"Recorded payment {payment['payment_number']} of {payment['amount']}"))
        self.stdout.write(self.style.SUCCESS("Demo data setup complete!"))
