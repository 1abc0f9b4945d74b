from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Mapping

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


# ----------------------------
# Money helpers
# ----------------------------
def to_decimal(value) -> Decimal:
    """
    Coerce a stored number to Decimal.
    Missing, blank, non-numeric, NaN and infinite values all become 0 so
    they can never leak into totals.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not number.is_finite():
        return Decimal("0")
    return number


def round_money(value) -> Decimal:
    # ROUND_HALF_UP on Decimal rounds half away from zero
    number = to_decimal(value)
    with localcontext() as ctx:
        # room for every integer digit plus the two cents
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        return number.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO

    def as_dict(self):
        return {
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "total": str(self.total),
        }


def line_amount(item: Mapping) -> Decimal:
    """quantity × unit_price, unrounded"""
    return to_decimal(item.get("quantity")) * to_decimal(item.get("unit_price"))


def line_tax(item: Mapping) -> Decimal:
    # an absent tax_rate counts as 0 here; defaults are applied on input
    return line_amount(item) * to_decimal(item.get("tax_rate")) / Decimal("100")


def compute_totals(items: Iterable[Mapping] | None) -> Totals:
    """
    Subtotal and tax are rounded to cents on their own, and the total is
    the sum of the two rounded figures (never re-rounded).
    """
    items = list(items or [])
    with localcontext() as ctx:
        # sums stay exact for anything the item caps in forms.py allow
        ctx.prec = max(ctx.prec, 60)
        subtotal = round_money(sum((line_amount(i) for i in items), Decimal("0")))
        tax = round_money(sum((line_tax(i) for i in items), Decimal("0")))
        total = subtotal + tax
    return Totals(subtotal=subtotal, tax=tax, total=total)
