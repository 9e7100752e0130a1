"""Fees router: fee structures, per-structure payment status, fee payments, student fees."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payments import service as payment_service
from app.api.v1.payments.schemas import PaymentResponse, RecordPaymentRequest
from app.auth.rbac import require_admin, require_self_or_admin
from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import PaymentType, UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    FeeStructureCreate,
    FeeStructureCreateResponse,
    FeeStructurePaymentsResponse,
    FeeStructureResponse,
    FeeStructureUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Fee Structure ---
@router.post(
    "/structure",
    response_model=FeeStructureCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_structure(
    payload: FeeStructureCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> FeeStructureCreateResponse:
    try:
        return await service.create_fee_structure(
            db, current_user.school_id, payload, created_by=current_user.id
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/structure", response_model=List[FeeStructureResponse])
async def list_fee_structures(
    class_id: Optional[UUID] = Query(None),
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> List[FeeStructureResponse]:
    return await service.list_fee_structures(
        db, current_user.school_id, class_id=class_id, academic_year=academic_year
    )


@router.put("/structure/{fee_structure_id}", response_model=FeeStructureResponse)
async def update_fee_structure(
    fee_structure_id: UUID,
    payload: FeeStructureUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> FeeStructureResponse:
    try:
        obj = await service.update_fee_structure(db, current_user.school_id, fee_structure_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee structure not found")
    return obj


@router.get("/structure/{fee_structure_id}/payments", response_model=FeeStructurePaymentsResponse)
async def get_fee_structure_payments(
    fee_structure_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> FeeStructurePaymentsResponse:
    try:
        return await service.get_fee_structure_payments(db, current_user.school_id, fee_structure_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Payments ---
@router.post("/payment", response_model=PaymentResponse)
async def record_fee_payment(
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
            payment_type=PaymentType.fee,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}",
    response_model=List[PaymentResponse],
    dependencies=[Depends(require_self_or_admin(UserRole.STUDENT, "student_id"))],
)
async def get_student_fees(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[PaymentResponse]:
    try:
        return await service.get_student_fees(db, current_user.school_id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
