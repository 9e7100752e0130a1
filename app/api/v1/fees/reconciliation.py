"""
Fan-out of a new fee structure into one pending fee Payment per enrolled student.

Each student's payment is committed on its own, so one bad row (duplicate or
storage failure) is reported per item and never undoes the fee structure or
the payments created before it.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payments import service as payment_service
from app.api.v1.payments.schemas import FeeObligationCreate
from app.core.enums import ReconciliationOutcome
from app.core.exceptions import DuplicateError
from app.core.models import FeeStructure, Student

from .schemas import ReconciliationItem

logger = logging.getLogger(__name__)


async def find_enrolled_students(db: AsyncSession, school_id: str, class_id: UUID) -> List[Student]:
    """Active students of the school currently assigned to the class."""
    result = await db.execute(
        select(Student)
        .where(
            Student.school_id == school_id,
            Student.assigned_class_id == class_id,
            Student.is_active.is_(True),
        )
        .order_by(Student.roll_number, Student.name)
    )
    return list(result.scalars().all())


async def reconcile_fee_structure(
    db: AsyncSession,
    school_id: str,
    fee_structure: FeeStructure,
    students: Sequence[Student],
    created_by: Optional[UUID] = None,
) -> List[ReconciliationItem]:
    # a rollback expires every loaded instance, so read what the loop needs up front
    fee_structure_id = fee_structure.id
    total_amount = fee_structure.total_amount
    due_date = fee_structure.due_date
    student_ids = [s.id for s in students]

    items: List[ReconciliationItem] = []
    for student_id in student_ids:
        obligation = FeeObligationCreate(
            student_id=student_id,
            fee_structure_id=fee_structure_id,
            amount=total_amount,
            due_date=due_date,
        )
        try:
            payment = await payment_service.create_obligation(
                db,
                school_id,
                obligation,
                created_by=created_by,
                duplicate_message="Fee payment already exists for this student",
            )
        except DuplicateError as e:
            items.append(
                ReconciliationItem(
                    student_id=student_id,
                    outcome=ReconciliationOutcome.duplicate,
                    detail=e.message,
                )
            )
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception(
                "Fee payment creation failed for student %s (structure=%s school=%s)",
                student_id, fee_structure_id, school_id,
            )
            items.append(
                ReconciliationItem(
                    student_id=student_id,
                    outcome=ReconciliationOutcome.failed,
                    detail=type(e).__name__,
                )
            )
            continue
        items.append(
            ReconciliationItem(
                student_id=student_id,
                outcome=ReconciliationOutcome.created,
                payment_id=payment.id,
            )
        )

    created = sum(1 for i in items if i.outcome == ReconciliationOutcome.created)
    logger.info(
        "Fee structure %s reconciled: %d/%d payments created (school=%s)",
        fee_structure_id, created, len(items), school_id,
    )
    return items
