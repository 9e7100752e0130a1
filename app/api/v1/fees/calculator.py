"""Fee structure arithmetic. The stored total is always derived here, never taken from a request."""

from decimal import Decimal
from typing import Any, Iterable, List, Mapping

from app.api.v1.payments.ledger import ZERO, to_decimal


def _amount(component: Any) -> Decimal:
    if isinstance(component, Mapping):
        return to_decimal(component.get("amount"))
    return to_decimal(component.amount)


def compute_fee_total(components: Iterable[Any]) -> Decimal:
    """Sum of component amounts (optional components included); 0 for an empty list."""
    return sum((_amount(c) for c in components), ZERO)


def components_to_json(components: Iterable[Any]) -> List[dict]:
    """JSON column form: amounts as decimal strings so no precision is lost."""
    return [
        {
            "name": c.name,
            "amount": str(to_decimal(c.amount)),
            "type": c.type.value,
            "is_optional": c.is_optional,
        }
        for c in components
    ]


def installments_to_json(installments: Iterable[Any]) -> List[dict]:
    # installment amounts are stored as given and not reconciled against the total
    return [
        {
            "name": i.name,
            "amount": str(to_decimal(i.amount)),
            "due_date": i.due_date.isoformat(),
        }
        for i in installments
    ]
