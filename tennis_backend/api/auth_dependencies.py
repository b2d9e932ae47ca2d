"""
Authentication dependencies for FastAPI routes.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from tennis_backend.services import auth_service, user_service
from tennis_backend.database.db import get_db_session
from tennis_backend.database.models import UserRole, VerificationStatus

security = HTTPBearer()


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        session: Database session
        credentials: HTTP Bearer token credentials

    Returns:
        User dictionary

    Raises:
        HTTPException: If token is invalid or user not found
    """
    payload = auth_service.verify_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("user_id")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def require_user(user: dict = Depends(get_current_user)) -> dict:
    """Require any authenticated user."""
    return user


def is_master(user: dict) -> bool:
    return user.get("role") == UserRole.MASTER.value


def is_manager(user: dict) -> bool:
    """Masters, and admins whose account has been approved."""
    if is_master(user):
        return True
    return (
        user.get("role") == UserRole.ADMIN.value
        and user.get("verification_status") == VerificationStatus.APPROVED.value
    )


async def require_master(user: dict = Depends(get_current_user)) -> dict:
    """Require the master account."""
    if not is_master(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Master access required")
    return user


async def require_manager(user: dict = Depends(get_current_user)) -> dict:
    """Require a master or an approved admin."""
    if is_manager(user):
        return user
    if user.get("role") == UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your admin account is awaiting approval",
        )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")


async def require_admin_or_master(user: dict = Depends(get_current_user)) -> dict:
    """Require role master or admin, regardless of approval state."""
    if user.get("role") not in (UserRole.MASTER.value, UserRole.ADMIN.value):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
