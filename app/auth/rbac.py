from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require ADMIN role. Used for fee, salary and timetable management."""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only school admin can perform this action",
        )
    return current_user


def require_self_or_admin(role: UserRole, path_param: str):
    """
    Dependency factory: admins may read any record, `role` users only their own.

    Example:
        Depends(require_self_or_admin(UserRole.STUDENT, "student_id"))
    """

    async def _checker(request: Request, current_user: CurrentUser = Depends(get_current_user)) -> None:
        if current_user.role == UserRole.ADMIN:
            return
        if current_user.role == role:
            try:
                target = UUID(request.path_params.get(path_param, ""))
            except ValueError:
                target = None
            if target == current_user.id:
                return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return _checker
