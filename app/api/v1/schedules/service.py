"""Schedule service: timetable writes (validated, unique per class/day/year) and dashboard reads."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import WEEK_DAYS
from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.core.models import Schedule, SchedulePeriod, SchoolClass, Teacher

from . import aggregation
from .schemas import (
    DailyClassScheduleResponse,
    DailyTeacherScheduleResponse,
    PeriodIn,
    RoomUtilizationResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
    WeeklyClassScheduleResponse,
    WeeklyOverviewResponse,
    WeeklyTeacherScheduleResponse,
)
from .validators import validate_and_sort_periods

logger = logging.getLogger(__name__)

DUPLICATE_SCHEDULE_MESSAGE = "Schedule already exists for this class and day"


def _academic_year(value: Optional[str]) -> str:
    return (value or "").strip() or settings.default_academic_year


def _day_order(schedule: Schedule) -> int:
    return WEEK_DAYS.index(schedule.day_of_week)


async def _get_class(db: AsyncSession, school_id: str, class_id: UUID) -> Optional[SchoolClass]:
    result = await db.execute(
        select(SchoolClass).where(SchoolClass.id == class_id, SchoolClass.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def _get_teacher(db: AsyncSession, school_id: str, teacher_id: UUID) -> Optional[Teacher]:
    result = await db.execute(
        select(Teacher).where(Teacher.id == teacher_id, Teacher.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def _validate_references(
    db: AsyncSession,
    school_id: str,
    class_id: UUID,
    periods: List[PeriodIn],
) -> None:
    """Class and every period's teacher must belong to the caller's school."""
    if not await _get_class(db, school_id, class_id):
        raise ValidationError("Invalid class or class does not belong to your school")
    teacher_ids = {p.teacher_id for p in periods}
    found = (
        await db.execute(
            select(Teacher.id).where(Teacher.id.in_(teacher_ids), Teacher.school_id == school_id)
        )
    ).scalars().all()
    if len(set(found)) != len(teacher_ids):
        raise ValidationError("One or more teachers do not belong to your school")


def _build_periods(periods: List[PeriodIn]) -> List[SchedulePeriod]:
    ordered = validate_and_sort_periods(periods)
    return [
        SchedulePeriod(
            position=position,
            period_number=p.period_number,
            subject=p.subject,
            teacher_id=p.teacher_id,
            start_time=p.start_time,
            end_time=p.end_time,
            room=p.room,
        )
        for position, p in enumerate(ordered)
    ]


async def _load_schedule(db: AsyncSession, school_id: str, schedule_id: UUID) -> Optional[Schedule]:
    result = await db.execute(
        select(Schedule)
        .where(Schedule.id == schedule_id, Schedule.school_id == school_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_schedule(
    db: AsyncSession,
    school_id: str,
    payload: ScheduleCreate,
    created_by: Optional[UUID] = None,
) -> ScheduleResponse:
    await _validate_references(db, school_id, payload.class_id, payload.periods)
    periods = _build_periods(payload.periods)
    academic_year = _academic_year(payload.academic_year)
    obj = Schedule(
        school_id=school_id,
        class_id=payload.class_id,
        day_of_week=payload.day_of_week.value,
        academic_year=academic_year,
        is_active=True,
        created_by=created_by,
        periods=periods,
    )
    try:
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(DUPLICATE_SCHEDULE_MESSAGE)
    logger.info(
        "Schedule created school=%s class=%s day=%s year=%s periods=%d",
        school_id, payload.class_id, obj.day_of_week, academic_year, len(periods),
    )
    return aggregation.schedule_to_response(await _load_schedule(db, school_id, obj.id))


async def list_schedules(
    db: AsyncSession,
    school_id: str,
    class_id: Optional[UUID] = None,
    day_of_week: Optional[str] = None,
    academic_year: Optional[str] = None,
    teacher_id: Optional[UUID] = None,
) -> List[ScheduleResponse]:
    stmt = select(Schedule).where(Schedule.school_id == school_id)
    if class_id is not None:
        stmt = stmt.where(Schedule.class_id == class_id)
    if teacher_id is not None:
        stmt = stmt.where(_teaches(teacher_id))
    if day_of_week is not None:
        stmt = stmt.where(Schedule.day_of_week == day_of_week)
    if academic_year:
        stmt = stmt.where(Schedule.academic_year == academic_year)
    result = await db.execute(stmt.order_by(Schedule.created_at))
    schedules = sorted(result.scalars().all(), key=_day_order)
    return [aggregation.schedule_to_response(s) for s in schedules]


async def get_schedule(
    db: AsyncSession,
    school_id: str,
    schedule_id: UUID,
) -> Optional[ScheduleResponse]:
    obj = await _load_schedule(db, school_id, schedule_id)
    return aggregation.schedule_to_response(obj) if obj else None


async def update_schedule(
    db: AsyncSession,
    school_id: str,
    schedule_id: UUID,
    payload: ScheduleUpdate,
) -> Optional[ScheduleResponse]:
    obj = await _load_schedule(db, school_id, schedule_id)
    if not obj:
        return None
    await _validate_references(db, school_id, payload.class_id, payload.periods)
    periods = _build_periods(payload.periods)
    obj.class_id = payload.class_id
    obj.day_of_week = payload.day_of_week.value
    obj.academic_year = _academic_year(payload.academic_year or obj.academic_year)
    obj.periods = periods
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(DUPLICATE_SCHEDULE_MESSAGE)
    logger.info("Schedule %s replaced with %d periods (school=%s)", schedule_id, len(periods), school_id)
    return aggregation.schedule_to_response(await _load_schedule(db, school_id, schedule_id))


async def delete_schedule(
    db: AsyncSession,
    school_id: str,
    schedule_id: UUID,
) -> bool:
    obj = await _load_schedule(db, school_id, schedule_id)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Schedule %s deleted (school=%s)", schedule_id, school_id)
    return True


# --- Dashboard projections ---
def _active(school_id: str, academic_year: str):
    return (
        Schedule.school_id == school_id,
        Schedule.academic_year == academic_year,
        Schedule.is_active.is_(True),
    )


def _teaches(teacher_id: UUID):
    return Schedule.periods.any(SchedulePeriod.teacher_id == teacher_id)


async def get_class_daily_schedule(
    db: AsyncSession,
    school_id: str,
    class_id: UUID,
    day_of_week: str,
    academic_year: Optional[str] = None,
) -> DailyClassScheduleResponse:
    academic_year = _academic_year(academic_year)
    school_class = await _get_class(db, school_id, class_id)
    if not school_class:
        raise NotFoundError("Class not found or does not belong to your school")
    result = await db.execute(
        select(Schedule).where(
            *_active(school_id, academic_year),
            Schedule.class_id == class_id,
            Schedule.day_of_week == day_of_week,
        )
    )
    return aggregation.daily_for_class(result.scalar_one_or_none(), day_of_week, academic_year, school_class)


async def get_teacher_daily_schedule(
    db: AsyncSession,
    school_id: str,
    teacher_id: UUID,
    day_of_week: str,
    academic_year: Optional[str] = None,
) -> DailyTeacherScheduleResponse:
    academic_year = _academic_year(academic_year)
    teacher = await _get_teacher(db, school_id, teacher_id)
    if not teacher:
        raise NotFoundError("Teacher not found or does not belong to your school")
    result = await db.execute(
        select(Schedule)
        .where(
            *_active(school_id, academic_year),
            Schedule.day_of_week == day_of_week,
            _teaches(teacher_id),
        )
        .order_by(Schedule.created_at)
    )
    return aggregation.daily_for_teacher(
        result.scalars().all(), teacher_id, day_of_week, academic_year, teacher_name=teacher.name
    )


async def get_class_weekly_schedule(
    db: AsyncSession,
    school_id: str,
    class_id: UUID,
    academic_year: Optional[str] = None,
) -> WeeklyClassScheduleResponse:
    academic_year = _academic_year(academic_year)
    school_class = await _get_class(db, school_id, class_id)
    if not school_class:
        raise NotFoundError("Class not found or does not belong to your school")
    result = await db.execute(
        select(Schedule).where(*_active(school_id, academic_year), Schedule.class_id == class_id)
    )
    return aggregation.weekly_for_class(result.scalars().all(), academic_year, school_class)


async def get_teacher_weekly_schedule(
    db: AsyncSession,
    school_id: str,
    teacher_id: UUID,
    academic_year: Optional[str] = None,
) -> WeeklyTeacherScheduleResponse:
    academic_year = _academic_year(academic_year)
    if not await _get_teacher(db, school_id, teacher_id):
        raise NotFoundError("Teacher not found or does not belong to your school")
    result = await db.execute(
        select(Schedule)
        .where(*_active(school_id, academic_year), _teaches(teacher_id))
        .order_by(Schedule.created_at)
    )
    return aggregation.weekly_for_teacher(result.scalars().all(), teacher_id, academic_year)


async def get_room_utilization(
    db: AsyncSession,
    school_id: str,
    day_of_week: str,
    academic_year: Optional[str] = None,
) -> RoomUtilizationResponse:
    academic_year = _academic_year(academic_year)
    result = await db.execute(
        select(Schedule).where(
            *_active(school_id, academic_year),
            Schedule.day_of_week == day_of_week,
            Schedule.periods.any(SchedulePeriod.room.isnot(None)),
        )
    )
    return aggregation.room_utilization(result.scalars().all(), day_of_week, academic_year)


async def get_weekly_overview(
    db: AsyncSession,
    school_id: str,
    academic_year: Optional[str] = None,
) -> WeeklyOverviewResponse:
    academic_year = _academic_year(academic_year)
    result = await db.execute(
        select(Schedule)
        .where(Schedule.school_id == school_id, Schedule.academic_year == academic_year)
        .order_by(Schedule.created_at)
    )
    return aggregation.weekly_overview(result.scalars().all(), academic_year)
