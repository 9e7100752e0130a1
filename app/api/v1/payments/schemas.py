"""Payment ledger schemas. Fee and salary obligations share one table, discriminated by payment_type."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.enums import PaymentMethod, PaymentStatus, PaymentType

SALARY_MONTH_REGEX = r"^\d{4}-(0[1-9]|1[0-2])$"


# --- Obligation creation (tagged variant) ---
class FeeObligationCreate(BaseModel):
    payment_type: Literal["fee"] = "fee"
    student_id: UUID
    fee_structure_id: UUID
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    due_date: datetime
    remarks: Optional[str] = None


class SalaryObligationCreate(BaseModel):
    payment_type: Literal["salary"] = "salary"
    teacher_id: UUID
    salary_month: str = Field(..., pattern=SALARY_MONTH_REGEX, description="YYYY-MM")
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    due_date: datetime
    remarks: Optional[str] = None


PaymentObligationCreate = Annotated[
    Union[FeeObligationCreate, SalaryObligationCreate],
    Field(discriminator="payment_type"),
]


# --- Recording ---
class RecordPaymentRequest(BaseModel):
    """One transaction against an existing obligation."""

    payment_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    payment_method: PaymentMethod
    payment_date: Optional[datetime] = Field(None, description="Defaults to now")
    transaction_id: Optional[str] = Field(None, max_length=100)
    remarks: Optional[str] = None

    @field_validator("payment_method")
    @classmethod
    def method_must_be_real(cls, v: PaymentMethod) -> PaymentMethod:
        if v == PaymentMethod.pending:
            raise ValueError("payment_method must be one of cash, bank_transfer, online, cheque, card")
        return v

    @field_validator("transaction_id", "remarks")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


# --- Responses ---
class PaymentHistoryEntryResponse(BaseModel):
    id: UUID
    amount: Decimal
    payment_date: datetime
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    remarks: Optional[str] = None
    recorded_by: UUID
    created_at: datetime


class PaymentResponse(BaseModel):
    id: UUID
    school_id: str
    payment_type: PaymentType
    student_id: Optional[UUID] = None
    student_name: Optional[str] = None
    student_roll_number: Optional[str] = None
    fee_structure_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    teacher_name: Optional[str] = None
    salary_month: Optional[str] = None
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    payment_date: datetime
    due_date: datetime
    status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    remarks: Optional[str] = None
    history: List[PaymentHistoryEntryResponse] = []
    created_at: datetime
    updated_at: datetime


class PaymentStatistics(BaseModel):
    total_count: int
    completed_count: int
    partial_count: int
    pending_count: int
    overdue_count: int
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
