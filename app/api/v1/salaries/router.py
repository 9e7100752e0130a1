"""Salaries router: salary obligations, salary payments, teacher salary view."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payments import service as payment_service
from app.api.v1.payments.schemas import SALARY_MONTH_REGEX, PaymentResponse, RecordPaymentRequest
from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin, require_self_or_admin
from app.auth.schemas import CurrentUser
from app.core.enums import PaymentStatus, PaymentType, UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import SalaryCreate, SalaryListResponse
from . import service

router = APIRouter(prefix="/api/v1/salaries", tags=["salaries"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_salary(
    payload: SalaryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> PaymentResponse:
    try:
        return await service.create_salary(db, current_user.school_id, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=SalaryListResponse)
async def list_salaries(
    month: Optional[str] = Query(None, pattern=SALARY_MONTH_REGEX, description="YYYY-MM"),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> SalaryListResponse:
    return await service.list_salaries(db, current_user.school_id, month=month, status_filter=status_filter)


@router.post("/payment", response_model=PaymentResponse)
async def record_salary_payment(
    payload: RecordPaymentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> PaymentResponse:
    try:
        return await payment_service.record_payment(
            db,
            current_user.school_id,
            payload.payment_id,
            payload,
            recorded_by=current_user.id,
            payment_type=PaymentType.salary,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/teacher/{teacher_id}",
    response_model=List[PaymentResponse],
    dependencies=[Depends(require_self_or_admin(UserRole.TEACHER, "teacher_id"))],
)
async def get_teacher_salaries(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[PaymentResponse]:
    try:
        return await service.get_teacher_salaries(db, current_user.school_id, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
