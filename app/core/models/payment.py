"""Payment ledger: fee and salary obligations plus their append-only history."""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import PaymentMethod, PaymentStatus
from app.core.time_utils import utcnow
from app.db.session import Base


class Payment(Base):
    """
    One obligation: a student fee (payment_type='fee') or a teacher salary (payment_type='salary').
    remaining_amount and status are derived; paid_amount only moves through record_payment.
    Every UPDATE is conditioned on version (optimistic concurrency).
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("payment_type IN ('fee','salary')", name="chk_payment_type"),
        CheckConstraint(
            "("
            "(payment_type = 'fee' AND student_id IS NOT NULL AND fee_structure_id IS NOT NULL"
            " AND teacher_id IS NULL AND salary_month IS NULL)"
            " OR "
            "(payment_type = 'salary' AND teacher_id IS NOT NULL AND salary_month IS NOT NULL"
            " AND student_id IS NULL AND fee_structure_id IS NULL)"
            ")",
            name="chk_payment_variant_fields",
        ),
        CheckConstraint(
            "status IN ('pending','partial','completed','overdue')",
            name="chk_payment_status",
        ),
        CheckConstraint("amount >= 0", name="chk_payment_amount_non_negative"),
        CheckConstraint("paid_amount >= 0 AND paid_amount <= amount", name="chk_payment_paid_within_amount"),
        UniqueConstraint("school_id", "student_id", "fee_structure_id", name="uq_payment_school_student_fee_structure"),
        UniqueConstraint("school_id", "teacher_id", "salary_month", name="uq_payment_school_teacher_salary_month"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    payment_type = Column(String(10), nullable=False)

    # fee variant
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=True, index=True)
    fee_structure_id = Column(
        UUID(as_uuid=True),
        ForeignKey("fee_structures.id"),
        nullable=True,
        index=True,
    )
    # salary variant
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=True, index=True)
    salary_month = Column(String(7), nullable=True)  # YYYY-MM

    amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    remaining_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    due_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.pending.value)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.pending.value)
    transaction_id = Column(String(100), nullable=True)
    remarks = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    history = relationship(
        "PaymentHistoryEntry",
        back_populates="payment",
        order_by="PaymentHistoryEntry.created_at",
        lazy="selectin",
    )
    student = relationship("Student", foreign_keys=[student_id], lazy="joined")
    teacher = relationship("Teacher", foreign_keys=[teacher_id], lazy="joined")

    __mapper_args__ = {"version_id_col": version}


class PaymentHistoryEntry(Base):
    """Immutable record of one recorded transaction against a Payment."""

    __tablename__ = "payment_history"
    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_payment_history_amount_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_id = Column(UUID(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False)
    payment_method = Column(String(20), nullable=False)
    transaction_id = Column(String(100), nullable=True)
    remarks = Column(Text, nullable=True)
    recorded_by = Column(UUID(as_uuid=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    payment = relationship("Payment", back_populates="history")
