from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the caller's identity (user id, school id, role) from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("user_id") or payload.get("sub")
    school_id = payload.get("school_id")
    role_name = payload.get("role")
    if not user_id_str or not school_id or not role_name:
        raise credentials_exception

    try:
        user_id = UUID(user_id_str)
        role = UserRole(role_name)
    except ValueError:
        raise credentials_exception

    return CurrentUser(id=user_id, school_id=school_id, role=role)
