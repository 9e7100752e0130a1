"""Salaries service: one salary obligation per teacher per month."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payments import service as payment_service
from app.api.v1.payments.schemas import PaymentResponse, SalaryObligationCreate
from app.core.enums import PaymentStatus, PaymentType
from app.core.exceptions import NotFoundError, ValidationError
from app.core.models import Teacher
from app.core.time_utils import as_utc

from .schemas import SalaryCreate, SalaryListResponse


async def _get_teacher(db: AsyncSession, school_id: str, teacher_id: UUID) -> Optional[Teacher]:
    result = await db.execute(
        select(Teacher).where(Teacher.id == teacher_id, Teacher.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def create_salary(
    db: AsyncSession,
    school_id: str,
    payload: SalaryCreate,
    created_by: Optional[UUID] = None,
) -> PaymentResponse:
    if not await _get_teacher(db, school_id, payload.teacher_id):
        raise ValidationError("Teacher not found or does not belong to your school")
    payment = await payment_service.create_obligation(
        db,
        school_id,
        SalaryObligationCreate(
            teacher_id=payload.teacher_id,
            salary_month=payload.salary_month,
            amount=payload.amount,
            due_date=payload.due_date,
            remarks=payload.remarks,
        ),
        created_by=created_by,
        duplicate_message="Salary record already exists for this month",
    )
    return payment_service.payment_to_response(payment)


def _newest_month_first(payments: List[PaymentResponse]) -> List[PaymentResponse]:
    payments = sorted(payments, key=lambda p: as_utc(p.created_at), reverse=True)
    return sorted(payments, key=lambda p: p.salary_month or "", reverse=True)


async def list_salaries(
    db: AsyncSession,
    school_id: str,
    month: Optional[str] = None,
    status_filter: Optional[PaymentStatus] = None,
) -> SalaryListResponse:
    """Statistics cover the filtered list; status is the read-time status."""
    payments = await payment_service.list_payments(db, school_id, PaymentType.salary, salary_month=month)
    if status_filter is not None:
        payments = [p for p in payments if p.status == status_filter]
    payments = _newest_month_first(payments)
    return SalaryListResponse(
        salary_payments=payments,
        statistics=payment_service.build_statistics(payments),
    )


async def get_teacher_salaries(
    db: AsyncSession,
    school_id: str,
    teacher_id: UUID,
) -> List[PaymentResponse]:
    if not await _get_teacher(db, school_id, teacher_id):
        raise NotFoundError("Teacher not found")
    payments = await payment_service.list_payments(db, school_id, PaymentType.salary, teacher_id=teacher_id)
    return _newest_month_first(payments)
