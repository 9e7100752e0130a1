"""Class timetable: one Schedule per class/day/academic year, owning its ordered periods."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.time_utils import utcnow
from app.db.session import Base


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        # Concurrent creators race on this constraint, not on an in-process check
        UniqueConstraint(
            "school_id",
            "class_id",
            "day_of_week",
            "academic_year",
            name="uq_schedule_school_class_day_year",
        ),
        CheckConstraint(
            "day_of_week IN ('monday','tuesday','wednesday','thursday','friday','saturday')",
            name="chk_schedule_day_of_week",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(String(20), nullable=False, index=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(String(10), nullable=False)
    academic_year = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass", foreign_keys=[class_id], lazy="joined")
    periods = relationship(
        "SchedulePeriod",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="SchedulePeriod.position",
        lazy="selectin",
    )


class SchedulePeriod(Base):
    """A period inside a Schedule. position is the index after sorting by start_time."""

    __tablename__ = "schedule_periods"
    __table_args__ = (
        CheckConstraint("period_number BETWEEN 1 AND 10", name="chk_schedule_period_number"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    schedule_id = Column(UUID(as_uuid=True), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    period_number = Column(Integer, nullable=False)
    subject = Column(String(100), nullable=False)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM, 24-hour
    end_time = Column(String(5), nullable=False)
    room = Column(String(50), nullable=True)

    schedule = relationship("Schedule", back_populates="periods")
    teacher = relationship("Teacher", lazy="joined")
