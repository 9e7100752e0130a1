from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class DayOfWeek(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"


# Fixed key order of every weekly projection.
WEEK_DAYS = [d.value for d in DayOfWeek]


class FeeComponentType(str, Enum):
    tuition = "tuition"
    admission = "admission"
    examination = "examination"
    library = "library"
    sports = "sports"
    transport = "transport"
    other = "other"


class PaymentType(str, Enum):
    fee = "fee"
    salary = "salary"


class PaymentStatus(str, Enum):
    pending = "pending"
    partial = "partial"
    completed = "completed"
    overdue = "overdue"


class PaymentMethod(str, Enum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    online = "online"
    cheque = "cheque"
    card = "card"
    pending = "pending"


class ReconciliationOutcome(str, Enum):
    created = "created"
    duplicate = "duplicate"
    failed = "failed"
