"""Fees service: fee structures (derived totals), per-student reconciliation and fee payment views."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payments import service as payment_service
from app.api.v1.payments.schemas import PaymentResponse
from app.api.v1.schedules.aggregation import class_info
from app.core.config import settings
from app.core.enums import PaymentType
from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.core.models import FeeStructure, SchoolClass, Student
from app.core.time_utils import as_utc

from .calculator import components_to_json, compute_fee_total, installments_to_json
from .reconciliation import find_enrolled_students, reconcile_fee_structure
from .schemas import (
    FeeComponentResponse,
    FeeStructureCreate,
    FeeStructureCreateResponse,
    FeeStructurePaymentsResponse,
    FeeStructureResponse,
    FeeStructureUpdate,
    InstallmentResponse,
)

logger = logging.getLogger(__name__)

DUPLICATE_STRUCTURE_MESSAGE = "Fee structure with this name already exists for this class"


def _structure_to_response(fs: FeeStructure) -> FeeStructureResponse:
    return FeeStructureResponse(
        id=fs.id,
        school_id=fs.school_id,
        name=fs.name,
        class_id=fs.class_id,
        school_class=class_info(fs.school_class),
        academic_year=fs.academic_year,
        fee_components=[FeeComponentResponse(**c) for c in fs.fee_components or []],
        total_amount=fs.total_amount,
        due_date=fs.due_date,
        installments=[InstallmentResponse(**i) for i in fs.installments or []],
        is_active=fs.is_active,
        created_at=fs.created_at,
        updated_at=fs.updated_at,
    )


async def _load_structure(db: AsyncSession, school_id: str, fee_structure_id: UUID) -> Optional[FeeStructure]:
    result = await db.execute(
        select(FeeStructure)
        .where(FeeStructure.id == fee_structure_id, FeeStructure.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()


async def create_fee_structure(
    db: AsyncSession,
    school_id: str,
    payload: FeeStructureCreate,
    created_by: Optional[UUID] = None,
) -> FeeStructureCreateResponse:
    """Create the structure, then one pending fee payment per active student of the class."""
    cl = (
        await db.execute(
            select(SchoolClass).where(SchoolClass.id == payload.class_id, SchoolClass.school_id == school_id)
        )
    ).scalar_one_or_none()
    if not cl:
        raise ValidationError("Invalid class or class does not belong to your school")

    fs = FeeStructure(
        school_id=school_id,
        name=payload.name,
        class_id=payload.class_id,
        academic_year=(payload.academic_year or "").strip() or settings.default_academic_year,
        fee_components=components_to_json(payload.fee_components),
        total_amount=compute_fee_total(payload.fee_components),
        due_date=payload.due_date,
        installments=installments_to_json(payload.installments),
        is_active=True,
        created_by=created_by,
    )
    try:
        db.add(fs)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(DUPLICATE_STRUCTURE_MESSAGE)
    logger.info(
        "Fee structure %s created (school=%s class=%s total=%s)",
        fs.id, school_id, payload.class_id, fs.total_amount,
    )

    fs = await _load_structure(db, school_id, fs.id)
    structure = _structure_to_response(fs)
    students = await find_enrolled_students(db, school_id, payload.class_id)
    items = await reconcile_fee_structure(db, school_id, fs, students, created_by=created_by)
    return FeeStructureCreateResponse(
        fee_structure=structure,
        students_count=len(students),
        created_count=sum(1 for i in items if i.payment_id is not None),
        reconciliation=items,
    )


async def list_fee_structures(
    db: AsyncSession,
    school_id: str,
    class_id: Optional[UUID] = None,
    academic_year: Optional[str] = None,
) -> List[FeeStructureResponse]:
    stmt = select(FeeStructure).where(FeeStructure.school_id == school_id)
    if class_id is not None:
        stmt = stmt.where(FeeStructure.class_id == class_id)
    if academic_year:
        stmt = stmt.where(FeeStructure.academic_year == academic_year)
    result = await db.execute(stmt.order_by(FeeStructure.created_at.desc()))
    return [_structure_to_response(fs) for fs in result.unique().scalars().all()]


async def update_fee_structure(
    db: AsyncSession,
    school_id: str,
    fee_structure_id: UUID,
    payload: FeeStructureUpdate,
) -> Optional[FeeStructureResponse]:
    fs = await _load_structure(db, school_id, fee_structure_id)
    if not fs:
        return None
    if payload.name is not None:
        fs.name = payload.name.strip()
    if payload.fee_components is not None:
        fs.fee_components = components_to_json(payload.fee_components)
        fs.total_amount = compute_fee_total(payload.fee_components)
    if payload.due_date is not None:
        fs.due_date = payload.due_date
    if payload.installments is not None:
        fs.installments = installments_to_json(payload.installments)
    if payload.is_active is not None:
        fs.is_active = payload.is_active
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(DUPLICATE_STRUCTURE_MESSAGE)
    logger.info("Fee structure %s updated (school=%s total=%s)", fee_structure_id, school_id, fs.total_amount)
    return _structure_to_response(await _load_structure(db, school_id, fee_structure_id))


async def get_fee_structure_payments(
    db: AsyncSession,
    school_id: str,
    fee_structure_id: UUID,
) -> FeeStructurePaymentsResponse:
    fs = await _load_structure(db, school_id, fee_structure_id)
    if not fs:
        raise NotFoundError("Fee structure not found")
    payments = await payment_service.list_payments(
        db, school_id, PaymentType.fee, fee_structure_id=fee_structure_id
    )
    payments.sort(key=lambda p: (p.status.value, as_utc(p.due_date)))
    return FeeStructurePaymentsResponse(
        fee_structure=_structure_to_response(fs),
        payments=payments,
        statistics=payment_service.build_statistics(payments),
    )


async def get_student_fees(
    db: AsyncSession,
    school_id: str,
    student_id: UUID,
) -> List[PaymentResponse]:
    student = (
        await db.execute(select(Student).where(Student.id == student_id, Student.school_id == school_id))
    ).scalar_one_or_none()
    if not student:
        raise NotFoundError("Student not found")
    return await payment_service.list_payments(db, school_id, PaymentType.fee, student_id=student_id)
