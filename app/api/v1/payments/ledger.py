"""
Payment ledger rules: derived state and the balance / history invariants.

Pure functions. The service calls recompute_payment_derived_state at every
write site (obligation creation, payment recording) right before the flush.
"""

from collections import namedtuple
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from app.core.enums import PaymentStatus
from app.core.exceptions import ExceedsBalanceError, LedgerIntegrityError
from app.core.models import Payment, PaymentHistoryEntry
from app.core.time_utils import as_utc, utcnow

ZERO = Decimal("0")

PaymentState = namedtuple("PaymentState", ["paid_amount", "remaining_amount", "status"])


def to_decimal(val) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


def derive_payment_state(
    amount,
    paid_amount,
    due_date: Optional[datetime],
    now: Optional[datetime] = None,
) -> PaymentState:
    """
    paid is clamped to amount, remaining = amount - paid, and status follows:
    nothing paid -> overdue once now is past due_date, else pending;
    partly paid -> partial; fully paid -> completed.
    """
    amount = to_decimal(amount)
    paid = min(to_decimal(paid_amount), amount)
    remaining = amount - paid
    now = as_utc(now or utcnow())

    if paid == ZERO:
        due = as_utc(due_date)
        status = PaymentStatus.overdue if due is not None and now > due else PaymentStatus.pending
    elif paid < amount:
        status = PaymentStatus.partial
    else:
        status = PaymentStatus.completed
    return PaymentState(paid_amount=paid, remaining_amount=remaining, status=status)


def recompute_payment_derived_state(payment: Payment, now: Optional[datetime] = None) -> Payment:
    state = derive_payment_state(payment.amount, payment.paid_amount, payment.due_date, now)
    payment.paid_amount = state.paid_amount
    payment.remaining_amount = state.remaining_amount
    payment.status = state.status.value
    return payment


def ensure_within_balance(amount, paid_amount, increment) -> None:
    """Checked against the stored amounts, before anything is recomputed."""
    if to_decimal(paid_amount) + to_decimal(increment) > to_decimal(amount):
        raise ExceedsBalanceError()


def history_total(entries: Iterable[PaymentHistoryEntry]) -> Decimal:
    return sum((to_decimal(e.amount) for e in entries), ZERO)


def verify_history_total(payment: Payment, entries: Iterable[PaymentHistoryEntry]) -> None:
    """The history is the source of truth for paid_amount; a mismatch is never persisted."""
    total = history_total(entries)
    if total != to_decimal(payment.paid_amount):
        raise LedgerIntegrityError(
            f"Payment history total {total} does not match paid amount {payment.paid_amount}",
            payment_id=payment.id,
        )
