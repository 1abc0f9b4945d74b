import copy

from ..exceptions import PolicyViolation
from .status import QUOTE_ACCEPTED, INVOICE_UNPAID, effective_quote_status


# ------------------------------------
# Quote → Invoice conversion rules
# ------------------------------------
def can_convert(quote, today, converted=None) -> bool:
    """Only an accepted quote may seed an invoice."""
    return effective_quote_status(
        quote, today, converted=converted) == QUOTE_ACCEPTED


def ensure_convertible(quote, today, converted=None):
    status = effective_quote_status(quote, today, converted=converted)
    if status != QUOTE_ACCEPTED:
        raise PolicyViolation(
            f"Cannot create an invoice from a {status} quote; "
            "the quote must be accepted",
            code="quote_not_accepted",
        )
    return quote


def build_invoice_draft(quote, request_data: dict) -> dict:
    """
    Field values for a new Invoice raised from `quote`.

    Customer and line items always come from the quote, items by value so
    later edits to the quote can't reach the invoice. Status is always
    "unpaid" whatever the request says.
    """
    customer_id = request_data.get("customer")
    if customer_id is not None and customer_id != quote.customer_id:
        raise PolicyViolation(
            "Invoice customer must match the quote's customer",
            code="customer_mismatch",
        )

    return {
        "owner_id": quote.owner_id,
        "customer_id": quote.customer_id,
        "quote_id": quote.pk,
        "invoice_number": request_data["invoice_number"],
        "issue_date": request_data["issue_date"],
        "due_date": request_data["due_date"],
        "items": copy.deepcopy(quote.items or []),
        "status": INVOICE_UNPAID,
        "notes": request_data.get("notes") or "",
    }
