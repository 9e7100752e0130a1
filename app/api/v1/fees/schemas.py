"""Fees schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.api.v1.payments.schemas import PaymentResponse, PaymentStatistics
from app.api.v1.schedules.schemas import ClassInfo
from app.core.enums import FeeComponentType, ReconciliationOutcome


# --- Fee Structure ---
class FeeComponentIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    type: FeeComponentType
    is_optional: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Fee component name is required")
        return v


class InstallmentIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    due_date: datetime


class FeeStructureCreate(BaseModel):
    """There is no total field: the total is always computed from fee_components."""

    name: str = Field(..., min_length=2, max_length=255)
    class_id: UUID
    fee_components: List[FeeComponentIn] = Field(..., min_length=1)
    due_date: datetime
    installments: List[InstallmentIn] = []
    academic_year: Optional[str] = Field(None, max_length=20, description="e.g. 2024-25; defaults to current")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class FeeStructureUpdate(BaseModel):
    """Partial update. Existing payments keep the amount they were created with."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    fee_components: Optional[List[FeeComponentIn]] = Field(None, min_length=1)
    due_date: Optional[datetime] = None
    installments: Optional[List[InstallmentIn]] = None
    is_active: Optional[bool] = None


class FeeComponentResponse(BaseModel):
    name: str
    amount: Decimal
    type: FeeComponentType
    is_optional: bool


class InstallmentResponse(BaseModel):
    name: str
    amount: Decimal
    due_date: datetime


class FeeStructureResponse(BaseModel):
    id: UUID
    school_id: str
    name: str
    class_id: UUID
    school_class: Optional[ClassInfo] = None
    academic_year: str
    fee_components: List[FeeComponentResponse]
    total_amount: Decimal
    due_date: datetime
    installments: List[InstallmentResponse]
    is_active: bool
    created_at: datetime
    updated_at: datetime


# --- Reconciliation ---
class ReconciliationItem(BaseModel):
    student_id: UUID
    outcome: ReconciliationOutcome
    payment_id: Optional[UUID] = None
    detail: Optional[str] = None


class FeeStructureCreateResponse(BaseModel):
    fee_structure: FeeStructureResponse
    students_count: int
    created_count: int
    reconciliation: List[ReconciliationItem]


class FeeStructurePaymentsResponse(BaseModel):
    fee_structure: FeeStructureResponse
    payments: List[PaymentResponse]
    statistics: PaymentStatistics
