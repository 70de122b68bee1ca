"""Order pricing shared by the cart and the order transaction."""

from dataclasses import dataclass
from typing import Iterable

DEFAULT_TAX_RATE = 0.05


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    tax: float
    delivery_fee: float
    total_amount: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "delivery_fee": self.delivery_fee,
            "total_amount": self.total_amount,
        }


def line_subtotal(lines: Iterable[tuple[float, int]]) -> float:
    """Sum of price x quantity over ``(price, quantity)`` pairs."""
    return sum(price * quantity for price, quantity in lines)


def calculate_order_totals(
    subtotal: float,
    delivery_fee: float,
    tax_rate: float = DEFAULT_TAX_RATE,
) -> OrderTotals:
    """Calculate order tax and total from a subtotal."""
    tax = round(subtotal * tax_rate, 2)
    total = round(subtotal + tax + delivery_fee, 2)

    return OrderTotals(
        subtotal=round(subtotal, 2),
        tax=tax,
        delivery_fee=delivery_fee,
        total_amount=total,
    )
