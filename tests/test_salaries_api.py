from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.auth.schemas import CurrentUser
from app.core.enums import UserRole

from tests.helpers import SCHOOL_ID, in_days

BASE = "/api/v1/salaries"


async def create_salary(client: AsyncClient, teacher, month: str, amount: str = "30000", due_in_days: int = 5) -> dict:
    response = await client.post(
        BASE,
        json={
            "teacher_id": str(teacher.id),
            "amount": amount,
            "salary_month": month,
            "due_date": in_days(due_in_days).isoformat(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_salary_obligation(client: AsyncClient, school) -> None:
    data = await create_salary(client, school.math_teacher, "2024-06")

    assert data["payment_type"] == "salary"
    assert data["teacher_id"] == str(school.math_teacher.id)
    assert data["teacher_name"] == "Asha Rao"
    assert data["salary_month"] == "2024-06"
    assert data["student_id"] is None
    assert data["status"] == "pending"
    assert data["payment_method"] == "pending"
    assert Decimal(data["paid_amount"]) == Decimal("0")


@pytest.mark.asyncio
async def test_one_salary_per_teacher_per_month(client: AsyncClient, school) -> None:
    await create_salary(client, school.math_teacher, "2024-06")
    response = await client.post(
        BASE,
        json={
            "teacher_id": str(school.math_teacher.id),
            "amount": "30000",
            "salary_month": "2024-06",
            "due_date": in_days(5).isoformat(),
        },
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Salary record already exists for this month"

    # same month for another teacher is fine
    await create_salary(client, school.science_teacher, "2024-06")


@pytest.mark.asyncio
async def test_salary_input_validation(client: AsyncClient, school) -> None:
    bad_month = await client.post(
        BASE,
        json={
            "teacher_id": str(school.math_teacher.id),
            "amount": "30000",
            "salary_month": "2024-13",
            "due_date": in_days(5).isoformat(),
        },
    )
    assert bad_month.status_code == 422

    foreign = await client.post(
        BASE,
        json={
            "teacher_id": str(school.outside_teacher.id),
            "amount": "30000",
            "salary_month": "2024-06",
            "due_date": in_days(5).isoformat(),
        },
    )
    assert foreign.status_code == 400


@pytest.mark.asyncio
async def test_salary_payments_and_listing(client: AsyncClient, school) -> None:
    june = await create_salary(client, school.math_teacher, "2024-06")
    await create_salary(client, school.science_teacher, "2024-06", amount="28000")
    await create_salary(client, school.math_teacher, "2024-07")

    paid = await client.post(
        f"{BASE}/payment",
        json={"payment_id": june["id"], "amount": "30000", "payment_method": "bank_transfer"},
    )
    assert paid.status_code == 200, paid.text
    assert paid.json()["status"] == "completed"

    over = await client.post(
        f"{BASE}/payment",
        json={"payment_id": june["id"], "amount": "1", "payment_method": "cash"},
    )
    assert over.status_code == 400

    listing = (await client.get(BASE, params={"month": "2024-06"})).json()
    assert len(listing["salary_payments"]) == 2
    assert listing["statistics"]["completed_count"] == 1
    assert listing["statistics"]["pending_count"] == 1
    assert Decimal(listing["statistics"]["total_amount"]) == Decimal("58000")
    assert Decimal(listing["statistics"]["remaining_amount"]) == Decimal("28000")

    completed = (await client.get(BASE, params={"status": "completed"})).json()
    assert [p["id"] for p in completed["salary_payments"]] == [june["id"]]

    everything = (await client.get(BASE)).json()["salary_payments"]
    assert [p["salary_month"] for p in everything][0] == "2024-07"


@pytest.mark.asyncio
async def test_salary_payment_cannot_go_through_the_fee_route(client: AsyncClient, school) -> None:
    salary = await create_salary(client, school.math_teacher, "2024-06")
    response = await client.post(
        "/api/v1/fees/payment",
        json={"payment_id": salary["id"], "amount": "100", "payment_method": "cash"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_teachers_only_see_their_own_salary(client: AsyncClient, school, login_as) -> None:
    salary = await create_salary(client, school.math_teacher, "2024-06")
    await create_salary(client, school.science_teacher, "2024-06")

    login_as(CurrentUser(id=school.math_teacher.id, school_id=SCHOOL_ID, role=UserRole.TEACHER))
    own = await client.get(f"{BASE}/teacher/{school.math_teacher.id}")
    assert own.status_code == 200
    assert [p["id"] for p in own.json()] == [salary["id"]]

    assert (await client.get(f"{BASE}/teacher/{school.science_teacher.id}")).status_code == 403
    assert (await client.get(BASE)).status_code == 403

    single = await client.get(f"/api/v1/payments/{salary['id']}")
    assert single.status_code == 200
    assert single.json()["salary_month"] == "2024-06"


@pytest.mark.asyncio
async def test_payment_lookup_includes_history(client: AsyncClient, school) -> None:
    salary = await create_salary(client, school.math_teacher, "2024-06")
    await client.post(
        f"{BASE}/payment",
        json={"payment_id": salary["id"], "amount": "10000", "payment_method": "cheque", "remarks": "advance"},
    )

    response = await client.get(f"/api/v1/payments/{salary['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "partial"
    assert len(body["history"]) == 1
    assert body["history"][0]["payment_method"] == "cheque"
    assert body["history"][0]["remarks"] == "advance"
    assert body["remarks"] == "advance"


@pytest.mark.asyncio
async def test_salary_amount_is_limited_to_cents(client: AsyncClient, school) -> None:
    response = await client.post(
        BASE,
        json={
            "teacher_id": str(school.math_teacher.id),
            "amount": "30000.999",
            "salary_month": "2024-06",
            "due_date": in_days(5).isoformat(),
        },
    )
    assert response.status_code == 422
