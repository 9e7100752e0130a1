"""Fee structure: fee schedule per class per academic year."""

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.time_utils import utcnow
from app.db.session import Base


class FeeStructure(Base):
    """
    Fee components, installments and due date for one class and academic year.
    total_amount is derived from fee_components and is recomputed on every write.
    """

    __tablename__ = "fee_structures"
    __table_args__ = (
        UniqueConstraint(
            "school_id",
            "class_id",
            "academic_year",
            "name",
            name="uq_fee_structure_school_class_year_name",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    academic_year = Column(String(20), nullable=False)
    # [{"name", "amount" (decimal string), "type", "is_optional"}]
    fee_components = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    due_date = Column(DateTime(timezone=True), nullable=False)
    # [{"name", "amount" (decimal string), "due_date" (ISO 8601)}]
    installments = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id], lazy="joined")
