from uuid import UUID

from pydantic import BaseModel, field_validator

from app.core.enums import UserRole


class CurrentUser(BaseModel):
    """Identity context for every request.
    id is the admin, teacher or student id depending on role; school_id scopes every query.
    """

    id: UUID
    school_id: str
    role: UserRole

    @field_validator("school_id")
    @classmethod
    def normalize_school_id(cls, v: str) -> str:
        return v.strip().upper()
