"""Salary schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.payments.schemas import SALARY_MONTH_REGEX, PaymentResponse, PaymentStatistics


class SalaryCreate(BaseModel):
    teacher_id: UUID
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    salary_month: str = Field(..., pattern=SALARY_MONTH_REGEX, description="YYYY-MM")
    due_date: datetime
    remarks: Optional[str] = None


class SalaryListResponse(BaseModel):
    salary_payments: List[PaymentResponse]
    statistics: PaymentStatistics
