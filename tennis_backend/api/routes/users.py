"""User, player and account administration route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.database.db import get_db_session
from tennis_backend.database.models import UserRole
from tennis_backend.services import auth_service, user_service
from tennis_backend.api.auth_dependencies import (
    require_user,
    require_master,
    require_manager,
    require_admin_or_master,
)
from tennis_backend.models.schemas import (
    CreateUserRequest,
    UpdateProfileRequest,
    UpdateVerificationStatusRequest,
    UpdateRoleRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/users")
async def list_users(
    current_user: dict = Depends(require_admin_or_master),
    session: AsyncSession = Depends(get_db_session),
):
    """All accounts, newest first."""
    try:
        return await user_service.list_users(session)
    except Exception as e:
        logger.error(f"Error listing users: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing users: {str(e)}")


@router.get("/api/players")
async def list_players(
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Users who can be entered into tournaments, ordered by name."""
    try:
        return await user_service.list_players(session)
    except Exception as e:
        logger.error(f"Error listing players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing players: {str(e)}")


@router.post("/api/users")
async def create_user(
    payload: CreateUserRequest,
    current_user: dict = Depends(require_manager),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create an account on someone's behalf.

    Request body:
        {
            "email": "player@example.com",
            "password": "secret123",
            "full_name": "Jane Doe",
            "role": "player",     // "player" or "admin"
            "phone": "555-0100"   // Optional
        }
    """
    try:
        if not auth_service.validate_email(payload.email):
            raise HTTPException(status_code=400, detail="Please enter a valid email address")
        password_error = auth_service.validate_password(payload.password)
        if password_error:
            raise HTTPException(status_code=400, detail=password_error)

        user = await user_service.create_user(
            session=session,
            email=auth_service.normalize_email(payload.email),
            password_hash=auth_service.hash_password(payload.password),
            full_name=payload.full_name.strip(),
            role=payload.role,
            phone=payload.phone,
        )
        logger.info(f"User {current_user['id']} created user {user['id']}")
        return {"status": "success", "message": "User created successfully", "user": user}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating user: {str(e)}")


@router.put("/api/users/me", response_model=UserResponse)
async def update_current_user(
    payload: UpdateProfileRequest,
    current_user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update the current user's name and phone number."""
    try:
        if payload.full_name is not None and not payload.full_name.strip():
            raise HTTPException(status_code=400, detail="Full name cannot be empty")

        updated_user = await user_service.update_profile(
            session, current_user["id"], full_name=payload.full_name, phone=payload.phone
        )
        if not updated_user:
            raise HTTPException(status_code=404, detail="User not found")
        return UserResponse(**updated_user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating user profile: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating user profile: {str(e)}")


@router.put("/api/users/{user_id}/verification-status")
async def update_verification_status(
    user_id: int,
    payload: UpdateVerificationStatusRequest,
    current_user: dict = Depends(require_master),
    session: AsyncSession = Depends(get_db_session),
):
    """Approve or reject an account."""
    try:
        user = await user_service.update_verification_status(
            session, user_id, payload.verification_status
        )
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return {
            "status": "success",
            "message": f"Verification status set to {user['verification_status']}",
            "user": user,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating verification status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating verification status: {str(e)}")


@router.put("/api/users/{user_id}/role")
async def update_role(
    user_id: int,
    payload: UpdateRoleRequest,
    current_user: dict = Depends(require_master),
    session: AsyncSession = Depends(get_db_session),
):
    """Change an account's role. The master role cannot be granted."""
    try:
        if user_id == current_user["id"]:
            raise HTTPException(status_code=400, detail="You cannot change your own role")
        if payload.role == UserRole.MASTER:
            raise HTTPException(status_code=400, detail="Role must be admin or player")

        user = await user_service.update_role(session, user_id, payload.role)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return {"status": "success", "message": f"Role set to {user['role']}", "user": user}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating role: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating role: {str(e)}")


@router.delete("/api/users/{user_id}")
async def delete_user(
    user_id: int,
    current_user: dict = Depends(require_master),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete an account along with its matches and roster entries."""
    try:
        if user_id == current_user["id"]:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")

        deleted = await user_service.delete_user(session, user_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="User not found")
        return {"status": "success", "message": "User deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting user: {str(e)}")
