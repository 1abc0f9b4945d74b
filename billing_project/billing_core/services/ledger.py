from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .totals import ZERO, round_money, to_decimal

COUNTED_PAYMENT_STATUS = "completed"

SETTLEMENT_UNPAID = "unpaid"
SETTLEMENT_PARTIAL = "partial"
SETTLEMENT_SETTLED = "settled"
SETTLEMENT_OVERPAID = "overpaid"


@dataclass(frozen=True)
class LedgerSummary:
    total_paid: Decimal
    remaining_balance: Decimal
    settlement: str

    def as_dict(self):
        return {
            "total_paid": str(self.total_paid),
            "remaining_balance": str(self.remaining_balance),
            "settlement": self.settlement,
        }


def _field(payment, name):
    # payments arrive as model instances or plain dicts
    if isinstance(payment, dict):
        return payment.get(name)
    return getattr(payment, name, None)


def total_completed(payments: Iterable) -> Decimal:
    """Sum of completed payments; pending and failed ones are ignored."""
    paid = Decimal("0")
    for p in payments:
        if _field(p, "status") == COUNTED_PAYMENT_STATUS:
            paid += to_decimal(_field(p, "amount"))
    return round_money(paid)


def settlement_for(total, paid) -> str:
    """
    Payment-derived indicator only.
    It never changes the invoice's stored status.
    """
    if paid <= ZERO:
        return SETTLEMENT_UNPAID
    if paid < total:
        return SETTLEMENT_PARTIAL
    if paid == total:
        return SETTLEMENT_SETTLED
    return SETTLEMENT_OVERPAID


def summarize_payments(invoice_total, payments: Iterable) -> LedgerSummary:
    total = round_money(invoice_total)
    paid = total_completed(payments)
    # not clamped: a negative balance means the invoice was overpaid
    remaining = total - paid
    return LedgerSummary(
        total_paid=paid,
        remaining_balance=remaining,
        settlement=settlement_for(total, paid),
    )


def invoice_ledger(invoice, payments=None) -> LedgerSummary:
    """Ledger for a model instance; fetches its payments when not given"""
    if payments is None:
        payments = invoice.payments.all()
    return summarize_payments(invoice.totals.total, payments)
