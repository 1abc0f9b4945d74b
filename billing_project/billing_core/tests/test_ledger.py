from decimal import Decimal

from ..services.ledger import summarize_payments, total_completed


def test_only_completed_payments_count():
    payments = [
        {"amount": "50", "status": "completed"},
        {"amount": "20", "status": "completed"},
        {"amount": "1000", "status": "failed"},
        {"amount": "30", "status": "pending"},
    ]
    summary = summarize_payments(Decimal("120.00"), payments)
    assert summary.total_paid == Decimal("70.00")
    assert summary.remaining_balance == Decimal("50.00")
    assert summary.settlement == "partial"


def test_no_payments_leaves_full_balance():
    summary = summarize_payments(Decimal("600.00"), [])
    assert summary.as_dict() == {
        "total_paid": "0.00",
        "remaining_balance": "600.00",
        "settlement": "unpaid",
    }


def test_exact_payment_settles():
    summary = summarize_payments("600", [{"amount": "600.00", "status": "completed"}])
    assert summary.remaining_balance == Decimal("0.00")
    assert summary.settlement == "settled"


def test_overpayment_gives_negative_balance():
    summary = summarize_payments(
        Decimal("100.00"), [{"amount": "150", "status": "completed"}])
    assert summary.total_paid == Decimal("150.00")
    assert summary.remaining_balance == Decimal("-50.00")
    assert summary.settlement == "overpaid"


def test_payment_objects_are_accepted():
    class Row:
        def __init__(self, amount, status):
            self.amount = Decimal(amount)
            self.status = status

    assert total_completed([Row("10.10", "completed"),
                            Row("0.20", "completed"),
                            Row("99", "failed")]) == Decimal("10.30")
