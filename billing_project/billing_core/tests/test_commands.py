import pytest
from django.core.management import call_command

from billing_core.models import AuditLog, Invoice, Payment, Quote


@pytest.mark.django_db
def test_seed_demo_builds_a_full_chain(django_user_model):
    call_command("seed_demo", customer="Demo Co")

    user = django_user_model.objects.get(username="demo@example.com")
    quote = Quote.objects.for_owner(user).get()
    invoice = Invoice.objects.for_owner(user).get()
    assert invoice.quote_id == quote.pk
    assert quote.customer.name == "Demo Co"
    assert Payment.objects.for_owner(user).get().amount == 250

    # a second run reuses the user and picks fresh numbers
    call_command("create_demo_tenant")
    numbers = sorted(Quote.objects.for_owner(user)
                     .values_list("quote_number", flat=True))
    assert numbers == ["Q-DEMO", "Q-DEMO-1"]
    assert AuditLog.objects.for_owner(user).filter(action="create").count() == 8
