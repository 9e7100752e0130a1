"""
Read-side timetable projections: daily / weekly / room / workload views.

Pure functions over Schedule rows that the service already loaded (school-scoped,
periods eager-loaded). Periods were validated at write time, nothing is re-checked here.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from app.core.enums import WEEK_DAYS
from app.core.models import Schedule, SchedulePeriod, SchoolClass
from app.core.time_utils import to_minutes

from .schemas import (
    ClassInfo,
    DailyClassScheduleResponse,
    DailyTeacherScheduleResponse,
    DaySchedule,
    PeriodResponse,
    RoomSlot,
    RoomUtilizationResponse,
    ScheduleResponse,
    TeacherClassBlock,
    TeacherPeriodEntry,
    TeacherWorkloadStatistics,
    WeeklyClassScheduleResponse,
    WeeklyOverviewResponse,
    WeeklyTeacherScheduleResponse,
)


def _empty_week(factory) -> Dict[str, object]:
    return OrderedDict((day, factory()) for day in WEEK_DAYS)


def class_info(school_class: Optional[SchoolClass]) -> Optional[ClassInfo]:
    if school_class is None:
        return None
    return ClassInfo(
        id=school_class.id,
        name=school_class.name,
        grade=school_class.grade,
        section=school_class.section,
    )


def period_to_response(period: SchedulePeriod) -> PeriodResponse:
    return PeriodResponse(
        period_number=period.period_number,
        subject=period.subject,
        teacher_id=period.teacher_id,
        teacher_name=period.teacher.name if period.teacher else None,
        start_time=period.start_time,
        end_time=period.end_time,
        room=period.room,
    )


def schedule_to_response(schedule: Schedule) -> ScheduleResponse:
    periods = [period_to_response(p) for p in schedule.periods]
    return ScheduleResponse(
        id=schedule.id,
        school_id=schedule.school_id,
        class_id=schedule.class_id,
        school_class=class_info(schedule.school_class),
        day_of_week=schedule.day_of_week,
        academic_year=schedule.academic_year,
        is_active=schedule.is_active,
        periods=periods,
        total_periods=len(periods),
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )


def _by_start_time(periods: Iterable[SchedulePeriod]) -> List[SchedulePeriod]:
    return sorted(periods, key=lambda p: to_minutes(p.start_time))


def _teacher_periods(schedule: Schedule, teacher_id: UUID) -> List[SchedulePeriod]:
    return [p for p in schedule.periods if p.teacher_id == teacher_id]


def daily_for_class(
    schedule: Optional[Schedule],
    day_of_week: str,
    academic_year: str,
    school_class: Optional[SchoolClass] = None,
) -> DailyClassScheduleResponse:
    """A class's periods for one day. No schedule yields an empty view, not an error."""
    if schedule is None:
        return DailyClassScheduleResponse(
            day_of_week=day_of_week,
            academic_year=academic_year,
            school_class=class_info(school_class),
            periods=[],
            total_periods=0,
        )
    periods = [period_to_response(p) for p in schedule.periods]
    return DailyClassScheduleResponse(
        day_of_week=day_of_week,
        academic_year=academic_year,
        school_class=class_info(schedule.school_class or school_class),
        periods=periods,
        total_periods=len(periods),
    )


def daily_for_teacher(
    schedules: Sequence[Schedule],
    teacher_id: UUID,
    day_of_week: str,
    academic_year: str,
    teacher_name: Optional[str] = None,
) -> DailyTeacherScheduleResponse:
    """
    One merged agenda for a teacher across every class taught that day.
    Other teachers' periods are dropped; the result is ordered by start time.
    """
    entries = []
    classes = set()
    for schedule in schedules:
        own = _teacher_periods(schedule, teacher_id)
        if not own:
            continue
        classes.add(schedule.class_id)
        cl = schedule.school_class
        for period in own:
            entries.append((period, schedule.class_id, cl))

    entries.sort(key=lambda item: to_minutes(item[0].start_time))
    periods = [
        TeacherPeriodEntry(
            **period_to_response(period).model_dump(),
            class_id=class_id,
            class_name=cl.name if cl else None,
            class_grade=cl.grade if cl else None,
            class_section=cl.section if cl else None,
        )
        for period, class_id, cl in entries
    ]
    return DailyTeacherScheduleResponse(
        day_of_week=day_of_week,
        academic_year=academic_year,
        teacher_id=teacher_id,
        teacher_name=teacher_name,
        periods=periods,
        total_periods=len(periods),
        total_classes=len(classes),
    )


def weekly_for_class(
    schedules: Sequence[Schedule],
    academic_year: str,
    school_class: Optional[SchoolClass] = None,
) -> WeeklyClassScheduleResponse:
    week = _empty_week(lambda: None)
    for schedule in schedules:
        periods = [period_to_response(p) for p in schedule.periods]
        week[schedule.day_of_week] = DaySchedule(
            schedule_id=schedule.id,
            periods=periods,
            total_periods=len(periods),
        )
    return WeeklyClassScheduleResponse(
        school_class=class_info(school_class),
        academic_year=academic_year,
        weekly_schedule=week,
    )


def teacher_workload(schedules: Sequence[Schedule], teacher_id: UUID) -> TeacherWorkloadStatistics:
    """Periods per week, distinct classes taught and the mean over a six-day week."""
    total = 0
    classes = set()
    for schedule in schedules:
        own = _teacher_periods(schedule, teacher_id)
        if own:
            total += len(own)
            classes.add(schedule.class_id)
    return TeacherWorkloadStatistics(
        total_periods_per_week=total,
        total_classes_handled=len(classes),
        average_periods_per_day=round(total / len(WEEK_DAYS), 1),
    )


def weekly_for_teacher(
    schedules: Sequence[Schedule],
    teacher_id: UUID,
    academic_year: str,
) -> WeeklyTeacherScheduleResponse:
    week = _empty_week(list)
    for schedule in schedules:
        own = _teacher_periods(schedule, teacher_id)
        if not own:
            continue
        week[schedule.day_of_week].append(
            TeacherClassBlock(
                school_class=class_info(schedule.school_class),
                periods=[period_to_response(p) for p in _by_start_time(own)],
            )
        )
    for blocks in week.values():
        blocks.sort(key=lambda b: to_minutes(b.periods[0].start_time))
    return WeeklyTeacherScheduleResponse(
        teacher_id=teacher_id,
        academic_year=academic_year,
        weekly_workload=week,
        statistics=teacher_workload(schedules, teacher_id),
    )


def _class_label(cl: Optional[SchoolClass]) -> Optional[str]:
    if cl is None:
        return None
    suffix = f"{cl.grade or ''}{cl.section or ''}"
    return f"{cl.name} ({suffix})" if suffix else cl.name


def room_utilization(
    schedules: Sequence[Schedule],
    day_of_week: str,
    academic_year: str,
) -> RoomUtilizationResponse:
    """Periods that have a room, grouped per room and ordered by start time. Unused rooms are absent."""
    rooms: Dict[str, List[tuple]] = {}
    for schedule in schedules:
        for period in schedule.periods:
            if not period.room:
                continue
            rooms.setdefault(period.room, []).append((period, schedule))

    result: Dict[str, List[RoomSlot]] = {}
    for room in sorted(rooms):
        slots = sorted(rooms[room], key=lambda item: to_minutes(item[0].start_time))
        result[room] = [
            RoomSlot(
                start_time=period.start_time,
                end_time=period.end_time,
                subject=period.subject,
                period_number=period.period_number,
                teacher_id=period.teacher_id,
                teacher_name=period.teacher.name if period.teacher else None,
                class_id=schedule.class_id,
                class_label=_class_label(schedule.school_class),
            )
            for period, schedule in slots
        ]
    return RoomUtilizationResponse(
        day_of_week=day_of_week,
        academic_year=academic_year,
        room_utilization=result,
        total_rooms=len(result),
    )


def weekly_overview(schedules: Sequence[Schedule], academic_year: str) -> WeeklyOverviewResponse:
    week = _empty_week(list)
    for schedule in schedules:
        week[schedule.day_of_week].append(schedule_to_response(schedule))
    return WeeklyOverviewResponse(academic_year=academic_year, weekly_overview=week)
