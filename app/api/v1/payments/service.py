"""Payments service: obligation creation, payment recording (optimistic concurrency) and read views."""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.enums import PaymentMethod, PaymentStatus, PaymentType
from app.core.exceptions import ConcurrentUpdateError, DuplicateError, NotFoundError
from app.core.models import Payment, PaymentHistoryEntry
from app.core.time_utils import utcnow

from .ledger import (
    ZERO,
    derive_payment_state,
    ensure_within_balance,
    recompute_payment_derived_state,
    to_decimal,
    verify_history_total,
)
from .schemas import (
    FeeObligationCreate,
    PaymentHistoryEntryResponse,
    PaymentResponse,
    PaymentStatistics,
    RecordPaymentRequest,
    SalaryObligationCreate,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = {
    None: "Payment record not found",
    PaymentType.fee: "Payment record not found",
    PaymentType.salary: "Salary payment record not found",
}


def _history_to_response(entry: PaymentHistoryEntry) -> PaymentHistoryEntryResponse:
    return PaymentHistoryEntryResponse(
        id=entry.id,
        amount=to_decimal(entry.amount),
        payment_date=entry.payment_date,
        payment_method=entry.payment_method,
        transaction_id=entry.transaction_id,
        remarks=entry.remarks,
        recorded_by=entry.recorded_by,
        created_at=entry.created_at,
    )


def payment_to_response(payment: Payment, now: Optional[datetime] = None) -> PaymentResponse:
    """Status and remaining are derived against the current clock, not read from the row."""
    state = derive_payment_state(payment.amount, payment.paid_amount, payment.due_date, now)
    student = payment.student
    teacher = payment.teacher
    return PaymentResponse(
        id=payment.id,
        school_id=payment.school_id,
        payment_type=payment.payment_type,
        student_id=payment.student_id,
        student_name=student.name if student else None,
        student_roll_number=student.roll_number if student else None,
        fee_structure_id=payment.fee_structure_id,
        teacher_id=payment.teacher_id,
        teacher_name=teacher.name if teacher else None,
        salary_month=payment.salary_month,
        amount=to_decimal(payment.amount),
        paid_amount=state.paid_amount,
        remaining_amount=state.remaining_amount,
        payment_date=payment.payment_date,
        due_date=payment.due_date,
        status=state.status,
        payment_method=payment.payment_method,
        transaction_id=payment.transaction_id,
        remarks=payment.remarks,
        history=[_history_to_response(e) for e in payment.history],
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


def build_statistics(payments: Sequence[PaymentResponse]) -> PaymentStatistics:
    counts = {s: 0 for s in PaymentStatus}
    total = paid = remaining = ZERO
    for p in payments:
        counts[p.status] += 1
        total += p.amount
        paid += p.paid_amount
        remaining += p.remaining_amount
    return PaymentStatistics(
        total_count=len(payments),
        completed_count=counts[PaymentStatus.completed],
        partial_count=counts[PaymentStatus.partial],
        pending_count=counts[PaymentStatus.pending],
        overdue_count=counts[PaymentStatus.overdue],
        total_amount=total,
        paid_amount=paid,
        remaining_amount=remaining,
    )


async def _load_payment(
    db: AsyncSession,
    school_id: str,
    payment_id: UUID,
    payment_type: Optional[PaymentType] = None,
) -> Optional[Payment]:
    # populate_existing: always the committed row, never a stale identity-map copy
    stmt = (
        select(Payment)
        .where(Payment.id == payment_id, Payment.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    if payment_type is not None:
        stmt = stmt.where(Payment.payment_type == payment_type.value)
    result = await db.execute(stmt)
    return result.unique().scalar_one_or_none()


def build_obligation(
    school_id: str,
    obligation: Union[FeeObligationCreate, SalaryObligationCreate],
    created_by: Optional[UUID] = None,
) -> Payment:
    """A new, unpaid Payment row for either variant. Nothing is added to a session."""
    payment = Payment(
        school_id=school_id,
        payment_type=obligation.payment_type,
        amount=obligation.amount,
        paid_amount=ZERO,
        payment_date=utcnow(),
        due_date=obligation.due_date,
        payment_method=PaymentMethod.pending.value,
        remarks=obligation.remarks,
        created_by=created_by,
    )
    if isinstance(obligation, FeeObligationCreate):
        payment.student_id = obligation.student_id
        payment.fee_structure_id = obligation.fee_structure_id
    else:
        payment.teacher_id = obligation.teacher_id
        payment.salary_month = obligation.salary_month
    return recompute_payment_derived_state(payment)


async def create_obligation(
    db: AsyncSession,
    school_id: str,
    obligation: Union[FeeObligationCreate, SalaryObligationCreate],
    created_by: Optional[UUID] = None,
    duplicate_message: str = "Payment record already exists",
) -> Payment:
    """Insert and commit one obligation. A unique-constraint hit becomes DuplicateError."""
    payment = build_obligation(school_id, obligation, created_by)
    try:
        db.add(payment)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(duplicate_message)
    logger.info(
        "Created %s obligation %s (school=%s amount=%s)",
        obligation.payment_type, payment.id, school_id, payment.amount,
    )
    return await _load_payment(db, school_id, payment.id)


async def record_payment(
    db: AsyncSession,
    school_id: str,
    payment_id: UUID,
    payload: RecordPaymentRequest,
    recorded_by: UUID,
    payment_type: Optional[PaymentType] = None,
) -> PaymentResponse:
    """
    Append one transaction to a payment's history and move paid_amount forward.

    The UPDATE is conditioned on the version read here. If another writer got in
    first, the balance is re-checked against the fresh row: ExceedsBalanceError if
    the increment no longer fits, otherwise ConcurrentUpdateError so the caller
    can retry.
    """
    payment = await _load_payment(db, school_id, payment_id, payment_type)
    if not payment:
        raise NotFoundError(_NOT_FOUND[payment_type])
    ensure_within_balance(payment.amount, payment.paid_amount, payload.amount)

    paid_on = payload.payment_date or utcnow()
    payment.history.append(
        PaymentHistoryEntry(
            amount=payload.amount,
            payment_date=paid_on,
            payment_method=payload.payment_method.value,
            transaction_id=payload.transaction_id,
            remarks=payload.remarks,
            recorded_by=recorded_by,
        )
    )
    payment.paid_amount = to_decimal(payment.paid_amount) + payload.amount
    payment.payment_date = paid_on
    payment.payment_method = payload.payment_method.value
    if payload.transaction_id:
        payment.transaction_id = payload.transaction_id
    if payload.remarks:
        payment.remarks = payload.remarks
    recompute_payment_derived_state(payment)
    verify_history_total(payment, payment.history)

    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        current = await _load_payment(db, school_id, payment_id, payment_type)
        if not current:
            raise NotFoundError(_NOT_FOUND[payment_type])
        logger.warning(
            "Concurrent update on payment %s (school=%s); re-checking balance", payment_id, school_id
        )
        ensure_within_balance(current.amount, current.paid_amount, payload.amount)
        raise ConcurrentUpdateError()

    logger.info(
        "Recorded %s on payment %s (school=%s): paid=%s status=%s",
        payload.amount, payment_id, school_id, payment.paid_amount, payment.status,
    )
    return payment_to_response(payment)


async def get_payment(
    db: AsyncSession,
    school_id: str,
    payment_id: UUID,
) -> Optional[PaymentResponse]:
    payment = await _load_payment(db, school_id, payment_id)
    return payment_to_response(payment) if payment else None


async def list_payments(
    db: AsyncSession,
    school_id: str,
    payment_type: PaymentType,
    student_id: Optional[UUID] = None,
    fee_structure_id: Optional[UUID] = None,
    teacher_id: Optional[UUID] = None,
    salary_month: Optional[str] = None,
) -> List[PaymentResponse]:
    """School-scoped listing of one variant, newest due date last."""
    stmt = select(Payment).where(
        Payment.school_id == school_id,
        Payment.payment_type == payment_type.value,
    )
    if student_id is not None:
        stmt = stmt.where(Payment.student_id == student_id)
    if fee_structure_id is not None:
        stmt = stmt.where(Payment.fee_structure_id == fee_structure_id)
    if teacher_id is not None:
        stmt = stmt.where(Payment.teacher_id == teacher_id)
    if salary_month:
        stmt = stmt.where(Payment.salary_month == salary_month)
    result = await db.execute(stmt.order_by(Payment.due_date, Payment.created_at))
    now = utcnow()
    return [payment_to_response(p, now) for p in result.unique().scalars().all()]
