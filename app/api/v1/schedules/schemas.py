"""Schedule (timetable) schemas."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.enums import DayOfWeek
from app.core.time_utils import HHMM_PATTERN

HHMM_REGEX = HHMM_PATTERN.pattern


class PeriodIn(BaseModel):
    period_number: int = Field(..., ge=1, le=10)
    subject: str = Field(..., min_length=1, max_length=100)
    teacher_id: UUID
    start_time: str = Field(..., pattern=HHMM_REGEX, description="24-hour format, e.g. 09:00")
    end_time: str = Field(..., pattern=HHMM_REGEX, description="24-hour format, e.g. 09:45")
    room: Optional[str] = Field(None, max_length=50)

    @field_validator("subject")
    @classmethod
    def strip_subject(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Subject is required")
        return v

    @field_validator("room")
    @classmethod
    def blank_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ScheduleCreate(BaseModel):
    """Create one day's timetable for a class. Periods are submitted all at once."""

    class_id: UUID
    day_of_week: DayOfWeek
    periods: List[PeriodIn] = Field(..., min_length=1)
    academic_year: Optional[str] = Field(None, max_length=20, description="e.g. 2024-25; defaults to current")


class ScheduleUpdate(ScheduleCreate):
    """Full replacement: the period list is replaced and re-validated."""


class ClassInfo(BaseModel):
    id: UUID
    name: str
    grade: Optional[str] = None
    section: Optional[str] = None


class PeriodResponse(BaseModel):
    period_number: int
    subject: str
    teacher_id: UUID
    teacher_name: Optional[str] = None
    start_time: str
    end_time: str
    room: Optional[str] = None


class ScheduleResponse(BaseModel):
    id: UUID
    school_id: str
    class_id: UUID
    school_class: Optional[ClassInfo] = None
    day_of_week: DayOfWeek
    academic_year: str
    is_active: bool
    periods: List[PeriodResponse]
    total_periods: int
    created_at: datetime
    updated_at: datetime


# --- Projections ---
class DailyClassScheduleResponse(BaseModel):
    day_of_week: DayOfWeek
    academic_year: str
    school_class: Optional[ClassInfo] = None
    periods: List[PeriodResponse]
    total_periods: int


class TeacherPeriodEntry(PeriodResponse):
    class_id: UUID
    class_name: Optional[str] = None
    class_grade: Optional[str] = None
    class_section: Optional[str] = None


class DailyTeacherScheduleResponse(BaseModel):
    day_of_week: DayOfWeek
    academic_year: str
    teacher_id: UUID
    teacher_name: Optional[str] = None
    periods: List[TeacherPeriodEntry]
    total_periods: int
    total_classes: int


class DaySchedule(BaseModel):
    schedule_id: UUID
    periods: List[PeriodResponse]
    total_periods: int


class WeeklyClassScheduleResponse(BaseModel):
    school_class: Optional[ClassInfo] = None
    academic_year: str
    # monday..saturday; null when the class has no schedule that day
    weekly_schedule: Dict[str, Optional[DaySchedule]]


class TeacherClassBlock(BaseModel):
    school_class: Optional[ClassInfo] = None
    periods: List[PeriodResponse]


class TeacherWorkloadStatistics(BaseModel):
    total_periods_per_week: int
    total_classes_handled: int
    average_periods_per_day: float


class WeeklyTeacherScheduleResponse(BaseModel):
    teacher_id: UUID
    academic_year: str
    weekly_workload: Dict[str, List[TeacherClassBlock]]
    statistics: TeacherWorkloadStatistics


class RoomSlot(BaseModel):
    start_time: str
    end_time: str
    subject: str
    period_number: int
    teacher_id: UUID
    teacher_name: Optional[str] = None
    class_id: UUID
    class_label: Optional[str] = None


class RoomUtilizationResponse(BaseModel):
    day_of_week: DayOfWeek
    academic_year: str
    room_utilization: Dict[str, List[RoomSlot]]
    total_rooms: int


class WeeklyOverviewResponse(BaseModel):
    academic_year: str
    weekly_overview: Dict[str, List[ScheduleResponse]]
