import uuid

from sqlalchemy import Boolean, Column, DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.core.time_utils import utcnow
from app.db.session import Base


class Teacher(Base):
    """Teacher within a school. Referenced by schedule periods and salary payments."""

    __tablename__ = "teachers"
    __table_args__ = (
        # Email must be unique per school
        UniqueConstraint("school_id", "email", name="uq_teacher_school_email"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
