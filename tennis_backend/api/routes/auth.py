"""Authentication route handlers."""

import logging
from typing import Dict, Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from tennis_backend.database.db import get_db_session
from tennis_backend.services import auth_service, user_service
from tennis_backend.api.auth_dependencies import get_current_user
from tennis_backend.models.schemas import (
    SignupRequest,
    LoginRequest,
    ChangePasswordRequest,
    AuthResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _issue_token(user: dict) -> str:
    return auth_service.create_access_token(
        data={"user_id": user["id"], "email": user["email"], "role": user["role"]}
    )


@router.post("/api/auth/signup", response_model=Dict[str, Any])
@limiter.limit("10/minute")
async def signup(
    request: Request, payload: SignupRequest, session: AsyncSession = Depends(get_db_session)
):
    """
    Register a new account.

    Players are approved immediately; admins start pending until the master
    approves them. The account is usable for login either way.
    """
    try:
        if not auth_service.validate_email(payload.email):
            raise HTTPException(status_code=400, detail="Please enter a valid email address")
        password_error = auth_service.validate_password(payload.password)
        if password_error:
            raise HTTPException(status_code=400, detail=password_error)
        if not payload.full_name or not payload.full_name.strip():
            raise HTTPException(status_code=400, detail="Full name is required")

        user = await user_service.create_user(
            session=session,
            email=auth_service.normalize_email(payload.email),
            password_hash=auth_service.hash_password(payload.password),
            full_name=payload.full_name.strip(),
            role=payload.role,
            phone=payload.phone,
        )

        message = "Account created successfully"
        if user["verification_status"] == "pending":
            message = "Account created. Admin access is pending approval."

        return {
            "status": "success",
            "message": message,
            "access_token": _issue_token(user),
            "token_type": "bearer",
            "user": user,
        }
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during signup: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error during signup: {str(e)}")


@router.post("/api/auth/login", response_model=AuthResponse)
@limiter.limit("10/minute")
async def login(
    request: Request, payload: LoginRequest, session: AsyncSession = Depends(get_db_session)
):
    """Login with email and password."""
    try:
        user = await user_service.get_user_by_email(
            session, auth_service.normalize_email(payload.email), include_password_hash=True
        )
        if not user or not user.get("password_hash"):
            raise INVALID_CREDENTIALS_RESPONSE
        if not auth_service.verify_password(payload.password, user["password_hash"]):
            raise INVALID_CREDENTIALS_RESPONSE

        user.pop("password_hash")
        logger.info(f"User {user['id']} logged in")
        return AuthResponse(access_token=_issue_token(user), user=UserResponse(**user))
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during login: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error during login: {str(e)}")


@router.get("/api/auth/me", response_model=UserResponse)
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """Get current authenticated user information."""
    return UserResponse(**current_user)


@router.post("/api/auth/change-password", response_model=Dict[str, Any])
async def change_password(
    payload: ChangePasswordRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Change the current user's password after checking the old one."""
    try:
        password_hash = await user_service.get_password_hash(session, current_user["id"])
        if not password_hash or not auth_service.verify_password(
            payload.current_password, password_hash
        ):
            raise HTTPException(status_code=400, detail="Current password is incorrect")

        password_error = auth_service.validate_password(payload.new_password)
        if password_error:
            raise HTTPException(status_code=400, detail=password_error)

        success = await user_service.update_user_password(
            session, current_user["id"], auth_service.hash_password(payload.new_password)
        )
        if not success:
            raise HTTPException(status_code=404, detail="User not found")

        logger.info(f"User {current_user['id']} changed password")
        return {"status": "success", "message": "Password updated successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error changing password: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error changing password: {str(e)}")
