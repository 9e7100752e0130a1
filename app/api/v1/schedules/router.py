from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.enums import DayOfWeek
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    DailyClassScheduleResponse,
    DailyTeacherScheduleResponse,
    RoomUtilizationResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
    WeeklyClassScheduleResponse,
    WeeklyOverviewResponse,
    WeeklyTeacherScheduleResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


def _day(value: str) -> str:
    """Path segments like 'Monday' are accepted case-insensitively."""
    try:
        return DayOfWeek(value.strip().lower()).value
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid day of week")


@router.post(
    "",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_schedule(
    payload: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        return await service.create_schedule(db, current_user.school_id, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    class_id: Optional[UUID] = Query(None),
    day_of_week: Optional[DayOfWeek] = Query(None),
    academic_year: Optional[str] = Query(None),
    teacher_id: Optional[UUID] = Query(None, description="Schedules with at least one period taught by this teacher"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.list_schedules(
        db,
        current_user.school_id,
        class_id=class_id,
        day_of_week=day_of_week.value if day_of_week else None,
        academic_year=academic_year,
        teacher_id=teacher_id,
    )


@router.get("/weekly-overview", response_model=WeeklyOverviewResponse)
async def get_weekly_overview(
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.get_weekly_overview(db, current_user.school_id, academic_year)


@router.get("/class/{class_id}/daily/{day_of_week}", response_model=DailyClassScheduleResponse)
async def get_class_daily_schedule(
    class_id: UUID,
    day_of_week: str,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.get_class_daily_schedule(
            db, current_user.school_id, class_id, _day(day_of_week), academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}/weekly", response_model=WeeklyClassScheduleResponse)
async def get_class_weekly_schedule(
    class_id: UUID,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.get_class_weekly_schedule(db, current_user.school_id, class_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}/daily/{day_of_week}", response_model=DailyTeacherScheduleResponse)
async def get_teacher_daily_schedule(
    teacher_id: UUID,
    day_of_week: str,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.get_teacher_daily_schedule(
            db, current_user.school_id, teacher_id, _day(day_of_week), academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}/weekly", response_model=WeeklyTeacherScheduleResponse)
async def get_teacher_weekly_schedule(
    teacher_id: UUID,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await service.get_teacher_weekly_schedule(db, current_user.school_id, teacher_id, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/room-utilization/{day_of_week}", response_model=RoomUtilizationResponse)
async def get_room_utilization(
    day_of_week: str,
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.get_room_utilization(db, current_user.school_id, _day(day_of_week), academic_year)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    obj = await service.get_schedule(db, current_user.school_id, schedule_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return obj


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: UUID,
    payload: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        obj = await service.update_schedule(db, current_user.school_id, schedule_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return obj


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    deleted = await service.delete_schedule(db, current_user.school_id, schedule_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
