from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List

from app.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

PAID = "paid"
PARTIAL = "partial"
UNPAID = "unpaid"


def to_money(value) -> Decimal:
    d = Decimal(str(value))
    return d.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass
class LineTotal:
    item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass
class Totals:
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    paid_amount: Decimal
    status: str
    lines: List[LineTotal] = field(default_factory=list)

    def to_dict(self):
        return {
            "subtotal": float(self.subtotal),
            "discount": float(self.discount),
            "total_amount": float(self.total),
            "paid_amount": float(self.paid_amount),
            "payment_status": self.status,
            "items": [
                {
                    "item_id": line.item_id,
                    "quantity": line.quantity,
                    "unit_price": float(line.unit_price),
                    "line_total": float(line.line_total),
                }
                for line in self.lines
            ],
        }


def _number(value, label: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not number.is_finite() or number < 0:
        raise ValidationError(f"{label} must be a non-negative finite number")
    return number


def _quantity(value, label: str) -> int:
    number = _number(value, label)
    if number != number.to_integral_value():
        raise ValidationError(f"{label} must be a whole number")
    return int(number)


def _field(line, *names):
    for name in names:
        if isinstance(line, dict):
            if name in line:
                return line[name]
        elif hasattr(line, name):
            return getattr(line, name)
    return None


def payment_status(total, paid_amount) -> str:
    if paid_amount >= total:
        return PAID
    if paid_amount > 0:
        return PARTIAL
    return UNPAID


def compute_totals(line_items: Iterable, discount=0, paid_amount=0, policy: str = "allow") -> Totals:
    """Price a cart without touching storage.

    ``line_items`` are dicts or objects carrying ``item``/``item_id``,
    ``quantity`` and ``price``/``unit_price``. Quantities are whole units;
    money is rounded to cents before any comparison. ``policy`` decides what
    happens when the discount is larger than the subtotal: ``allow`` keeps
    the negative total, ``clamp`` caps the discount at the subtotal and
    ``reject`` raises.
    """
    lines = []
    subtotal = ZERO
    for index, line in enumerate(line_items, start=1):
        quantity = _quantity(_field(line, "quantity"), f"items[{index}].quantity")
        price = to_money(_number(_field(line, "unit_price", "price"), f"items[{index}].price"))
        line_total = to_money(price * quantity)
        subtotal += line_total
        lines.append(LineTotal(
            item_id=_field(line, "item_id", "item"),
            quantity=quantity,
            unit_price=price,
            line_total=line_total,
        ))

    discount = to_money(_number(discount or 0, "discount"))
    paid_amount = to_money(_number(paid_amount or 0, "paid_amount"))

    if discount > subtotal:
        if policy == "reject":
            raise ValidationError("Discount cannot exceed the subtotal")
        if policy == "clamp":
            discount = subtotal

    total = subtotal - discount
    return Totals(
        subtotal=subtotal,
        discount=discount,
        total=total,
        paid_amount=paid_amount,
        status=payment_status(total, paid_amount),
        lines=lines,
    )
