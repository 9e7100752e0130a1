from decimal import Decimal

from app.api.v1.fees.calculator import components_to_json, compute_fee_total
from app.api.v1.fees.schemas import FeeComponentIn, FeeStructureCreate


def components():
    return [
        FeeComponentIn(name="Tuition", amount=Decimal("5000"), type="tuition"),
        FeeComponentIn(name="Library", amount=Decimal("200"), type="library"),
        FeeComponentIn(name="Sports", amount=Decimal("300"), type="sports", is_optional=True),
        FeeComponentIn(name="Exam", amount=Decimal("150"), type="examination"),
    ]


def test_total_is_sum_of_components_including_optional() -> None:
    assert compute_fee_total(components()) == Decimal("5650")


def test_total_of_no_components_is_zero() -> None:
    assert compute_fee_total([]) == Decimal("0")


def test_total_from_stored_json_components() -> None:
    stored = components_to_json(components())
    assert stored[0] == {"name": "Tuition", "amount": "5000", "type": "tuition", "is_optional": False}
    assert compute_fee_total(stored) == Decimal("5650")


def test_fractional_amounts_do_not_drift() -> None:
    parts = [FeeComponentIn(name=f"Part {i}", amount=Decimal("0.10"), type="other") for i in range(3)]
    assert compute_fee_total(parts) == Decimal("0.30")


def test_create_request_ignores_client_supplied_total() -> None:
    payload = FeeStructureCreate.model_validate(
        {
            "name": "Term 1",
            "class_id": "00000000-0000-0000-0000-000000000001",
            "fee_components": [{"name": "Tuition", "amount": "5000", "type": "tuition"}],
            "due_date": "2030-01-01T00:00:00Z",
            "total_amount": "1",
        }
    )
    assert not hasattr(payload, "total_amount")
    assert compute_fee_total(payload.fee_components) == Decimal("5000")
