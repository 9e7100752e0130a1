"""School-scoped classes (e.g. Grade 5 A). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.core.time_utils import utcnow
from app.db.session import Base


class SchoolClass(Base):
    """School-scoped class master. Referenced by schedules and fee structures."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_class_school_name"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    grade = Column(String(20), nullable=True)
    section = Column(String(10), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
