from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.db.session import get_db

from .schemas import PaymentResponse
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """One fee or salary record with its history. Non-admins only see their own."""
    obj = await service.get_payment(db, current_user.school_id, payment_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found")
    if current_user.role != UserRole.ADMIN and current_user.id not in (obj.student_id, obj.teacher_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return obj
