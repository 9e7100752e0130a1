from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.auth.schemas import CurrentUser
from app.core.enums import UserRole

from tests.helpers import SCHOOL_ID

BASE = "/api/v1/schedules"


def period(number, subject, teacher, start, end, room=None) -> dict:
    return {
        "period_number": number,
        "subject": subject,
        "teacher_id": str(teacher.id),
        "start_time": start,
        "end_time": end,
        "room": room,
    }


async def create_schedule(client: AsyncClient, school_class, day: str, periods) -> dict:
    response = await client.post(BASE, json={"class_id": str(school_class.id), "day_of_week": day, "periods": periods})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_schedule_sorts_periods(client: AsyncClient, school) -> None:
    data = await create_schedule(
        client,
        school.class_a,
        "monday",
        [
            period(2, "Science", school.science_teacher, "10:00", "10:45", "Lab 1"),
            period(1, "Math", school.math_teacher, "09:00", "09:45", "Room 5"),
        ],
    )

    assert data["school_id"] == SCHOOL_ID
    assert data["academic_year"] == "2024-25"
    assert data["total_periods"] == 2
    assert [p["start_time"] for p in data["periods"]] == ["09:00", "10:00"]
    assert data["periods"][0]["teacher_name"] == "Asha Rao"
    assert data["school_class"]["name"] == "Class 5"

    fetched = await client.get(f"{BASE}/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["periods"] == data["periods"]


@pytest.mark.asyncio
async def test_duplicate_class_day_is_a_conflict(client: AsyncClient, school) -> None:
    periods = [period(1, "Math", school.math_teacher, "09:00", "09:45")]
    await create_schedule(client, school.class_a, "tuesday", periods)

    response = await client.post(
        BASE, json={"class_id": str(school.class_a.id), "day_of_week": "tuesday", "periods": periods}
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Schedule already exists for this class and day"


@pytest.mark.asyncio
async def test_overlapping_periods_are_rejected(client: AsyncClient, school) -> None:
    response = await client.post(
        BASE,
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "monday",
            "periods": [
                period(1, "Math", school.math_teacher, "09:00", "09:45"),
                period(2, "Science", school.science_teacher, "09:30", "10:15"),
            ],
        },
    )
    assert response.status_code == 400
    assert "overlap" in response.json()["detail"]


@pytest.mark.asyncio
async def test_malformed_time_fails_request_validation(client: AsyncClient, school) -> None:
    response = await client.post(
        BASE,
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "monday",
            "periods": [period(1, "Math", school.math_teacher, "9:75", "10:00")],
        },
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_teacher_or_class_from_another_school_is_rejected(client: AsyncClient, school) -> None:
    response = await client.post(
        BASE,
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "monday",
            "periods": [period(1, "Math", school.outside_teacher, "09:00", "09:45")],
        },
    )
    assert response.status_code == 400

    response = await client.post(
        BASE,
        json={
            "class_id": str(uuid4()),
            "day_of_week": "monday",
            "periods": [period(1, "Math", school.math_teacher, "09:00", "09:45")],
        },
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_only_admins_write_schedules(client: AsyncClient, school, login_as) -> None:
    login_as(CurrentUser(id=school.math_teacher.id, school_id=SCHOOL_ID, role=UserRole.TEACHER))
    response = await client.post(
        BASE,
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "monday",
            "periods": [period(1, "Math", school.math_teacher, "09:00", "09:45")],
        },
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_replaces_periods_and_delete_removes(client: AsyncClient, school) -> None:
    created = await create_schedule(
        client, school.class_a, "wednesday", [period(1, "Math", school.math_teacher, "09:00", "09:45")]
    )

    response = await client.put(
        f"{BASE}/{created['id']}",
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "wednesday",
            "periods": [
                period(2, "Art", school.science_teacher, "11:00", "11:45"),
                period(1, "English", school.math_teacher, "10:00", "10:45"),
            ],
        },
    )
    assert response.status_code == 200, response.text
    assert [p["subject"] for p in response.json()["periods"]] == ["English", "Art"]

    bad = await client.put(
        f"{BASE}/{created['id']}",
        json={
            "class_id": str(school.class_a.id),
            "day_of_week": "wednesday",
            "periods": [
                period(1, "English", school.math_teacher, "10:00", "10:45"),
                period(2, "Art", school.science_teacher, "10:30", "11:15"),
            ],
        },
    )
    assert bad.status_code == 400

    assert (await client.delete(f"{BASE}/{created['id']}")).status_code == 204
    assert (await client.get(f"{BASE}/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_class_daily_and_weekly_views(client: AsyncClient, school) -> None:
    await create_schedule(
        client,
        school.class_a,
        "monday",
        [
            period(2, "Science", school.science_teacher, "10:00", "10:45"),
            period(1, "Math", school.math_teacher, "09:00", "09:45"),
        ],
    )

    daily = await client.get(f"{BASE}/class/{school.class_a.id}/daily/Monday")
    assert daily.status_code == 200
    assert [p["subject"] for p in daily.json()["periods"]] == ["Math", "Science"]

    empty = await client.get(f"{BASE}/class/{school.class_a.id}/daily/friday")
    assert empty.status_code == 200
    assert empty.json()["periods"] == []

    weekly = (await client.get(f"{BASE}/class/{school.class_a.id}/weekly")).json()
    assert list(weekly["weekly_schedule"].keys()) == [
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
    ]
    assert weekly["weekly_schedule"]["monday"]["total_periods"] == 2
    assert weekly["weekly_schedule"]["tuesday"] is None

    assert (await client.get(f"{BASE}/class/{uuid4()}/weekly")).status_code == 404
    assert (await client.get(f"{BASE}/class/{school.class_a.id}/daily/sunday")).status_code == 400


@pytest.mark.asyncio
async def test_teacher_daily_and_weekly_views(client: AsyncClient, school) -> None:
    await create_schedule(
        client,
        school.class_a,
        "monday",
        [
            period(1, "Math", school.math_teacher, "09:00", "09:45"),
            period(2, "Science", school.science_teacher, "10:00", "10:45"),
        ],
    )
    await create_schedule(
        client, school.class_b, "monday", [period(1, "Math", school.math_teacher, "08:00", "08:45")]
    )
    await create_schedule(
        client, school.class_b, "thursday", [period(1, "Math", school.math_teacher, "12:00", "12:45")]
    )

    daily = (await client.get(f"{BASE}/teacher/{school.math_teacher.id}/daily/monday")).json()
    assert [p["start_time"] for p in daily["periods"]] == ["08:00", "09:00"]
    assert [p["class_name"] for p in daily["periods"]] == ["Class 6", "Class 5"]
    assert daily["total_periods"] == 2
    assert daily["total_classes"] == 2

    weekly = (await client.get(f"{BASE}/teacher/{school.math_teacher.id}/weekly")).json()
    assert len(weekly["weekly_workload"]["monday"]) == 2
    assert weekly["weekly_workload"]["friday"] == []
    assert weekly["statistics"] == {
        "total_periods_per_week": 3,
        "total_classes_handled": 2,
        "average_periods_per_day": 0.5,
    }

    foreign = await client.get(f"{BASE}/teacher/{school.outside_teacher.id}/weekly")
    assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_room_utilization_and_weekly_overview(client: AsyncClient, school) -> None:
    await create_schedule(
        client,
        school.class_a,
        "friday",
        [
            period(1, "Chemistry", school.science_teacher, "10:00", "10:45", "Lab 1"),
            period(2, "Math", school.math_teacher, "11:00", "11:45"),
        ],
    )
    await create_schedule(
        client, school.class_b, "friday", [period(1, "Physics", school.science_teacher, "09:00", "09:45", "Lab 1")]
    )

    rooms = (await client.get(f"{BASE}/room-utilization/friday")).json()
    assert list(rooms["room_utilization"].keys()) == ["Lab 1"]
    assert [s["subject"] for s in rooms["room_utilization"]["Lab 1"]] == ["Physics", "Chemistry"]
    assert rooms["total_rooms"] == 1

    overview = (await client.get(f"{BASE}/weekly-overview")).json()
    assert len(overview["weekly_overview"]["friday"]) == 2
    assert overview["weekly_overview"]["monday"] == []

    listed = (await client.get(BASE, params={"class_id": str(school.class_b.id)})).json()
    assert len(listed) == 1
    assert listed[0]["day_of_week"] == "friday"


@pytest.mark.asyncio
async def test_list_schedules_by_teacher(client: AsyncClient, school) -> None:
    monday = await create_schedule(
        client,
        school.class_a,
        "monday",
        [
            period(1, "Math", school.math_teacher, "09:00", "09:45"),
            period(2, "Science", school.science_teacher, "10:00", "10:45"),
        ],
    )
    tuesday = await create_schedule(
        client, school.class_b, "tuesday", [period(1, "Math", school.math_teacher, "08:00", "08:45")]
    )
    await create_schedule(
        client, school.class_b, "wednesday", [period(1, "Physics", school.science_teacher, "08:00", "08:45")]
    )

    math = (await client.get(BASE, params={"teacher_id": str(school.math_teacher.id)})).json()
    assert [s["id"] for s in math] == [monday["id"], tuesday["id"]]
    # whole schedules come back, including other teachers' periods
    assert len(math[0]["periods"]) == 2

    science_monday = (
        await client.get(BASE, params={"teacher_id": str(school.science_teacher.id), "day_of_week": "monday"})
    ).json()
    assert [s["id"] for s in science_monday] == [monday["id"]]

    assert (await client.get(BASE, params={"teacher_id": str(school.outside_teacher.id)})).json() == []
