"""
Effective status of quotes and invoices.

Stored status only records what a user chose. What callers see also
depends on the calendar: a sent quote past its expiry date reads as
"expired", an unpaid invoice past its due date reads as "overdue".
Those values are computed here on every read and never written back.

Comparisons are by calendar day in the reference zone
(settings.BILLING_REFERENCE_TIMEZONE, UTC unless configured), so the
same data gives the same answer on every server.
"""
import datetime
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

QUOTE_CONVERTED = "converted"
QUOTE_DECLINED = "declined"
QUOTE_EXPIRED = "expired"
QUOTE_ACCEPTED = "accepted"

INVOICE_PAID = "paid"
INVOICE_OVERDUE = "overdue"
INVOICE_UNPAID = "unpaid"


def reference_zone():
    return ZoneInfo(getattr(settings, "BILLING_REFERENCE_TIMEZONE", "UTC"))


def as_calendar_day(value, tz=None):
    """
    Reduce a date or datetime to a date, ignoring time of day.
    Aware datetimes are first moved into the reference zone; naive ones
    are taken as already being in it.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        if timezone.is_aware(value):
            value = value.astimezone(tz or reference_zone())
        return value.date()
    return value


def today_in_reference_zone(now=None):
    """Calendar day of `now` (defaults to the current time)."""
    if now is None:
        now = timezone.now()
    return as_calendar_day(now)


def is_before_day(value, today):
    """True when value's calendar day is strictly earlier than today"""
    day = as_calendar_day(value)
    return day is not None and day < as_calendar_day(today)


def quote_effective_status(status, expiry_date, today, converted=False):
    # Order matters: converted, then declined, then expiry
    if converted or status == QUOTE_CONVERTED:
        return QUOTE_CONVERTED
    if status == QUOTE_DECLINED:
        return QUOTE_DECLINED
    if is_before_day(expiry_date, today):
        return QUOTE_EXPIRED
    return status


def invoice_effective_status(status, due_date, today):
    if status == INVOICE_PAID:
        return INVOICE_PAID
    if is_before_day(due_date, today):
        return INVOICE_OVERDUE
    return INVOICE_UNPAID


def effective_quote_status(quote, today, converted=None):
    """Model-level wrapper; looks up conversion when not supplied"""
    if converted is None:
        converted = quote.is_converted()
    return quote_effective_status(
        quote.status, quote.expiry_date, today, converted=converted)


def effective_invoice_status(invoice, today):
    return invoice_effective_status(invoice.status, invoice.due_date, today)
