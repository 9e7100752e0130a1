from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    """Input violates an invariant owned by the core."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class InvalidTimeFormat(ValidationError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid time {value!r}: expected HH:MM (24-hour)")
        self.value = value


class OverlapError(ValidationError):
    """Two periods of the same day overlap. Indices refer to the submitted order."""

    def __init__(self, first_index: int, second_index: int) -> None:
        super().__init__(f"Periods cannot overlap (period #{first_index} and period #{second_index})")
        self.first_index = first_index
        self.second_index = second_index


class ExceedsBalanceError(ServiceError):
    def __init__(self, message: str = "Payment amount exceeds remaining balance") -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class DuplicateError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class ConcurrentUpdateError(ServiceError):
    """The row changed between read and write; the caller may retry."""

    def __init__(self, message: str = "Record was modified concurrently, please retry") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class LedgerIntegrityError(ServiceError):
    def __init__(self, message: str, payment_id: Optional[object] = None) -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.payment_id = payment_id
