import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.time_utils import utcnow
from app.db.session import Base


class Student(Base):
    """
    Student within a school.
    assigned_class_id may be empty right after admission; fee reconciliation only
    picks up active students assigned to the fee structure's class.
    """

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=True)
    assigned_class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    assigned_class = relationship("SchoolClass", foreign_keys=[assigned_class_id])
