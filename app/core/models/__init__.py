from app.core.models.class_model import SchoolClass
from app.core.models.teacher import Teacher
from app.core.models.student import Student
from app.core.models.schedule import Schedule, SchedulePeriod
from app.core.models.fee_structure import FeeStructure
from app.core.models.payment import Payment, PaymentHistoryEntry

__all__ = [
    "SchoolClass",
    "Teacher",
    "Student",
    "Schedule",
    "SchedulePeriod",
    "FeeStructure",
    "Payment",
    "PaymentHistoryEntry",
]
