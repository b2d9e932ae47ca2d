"""
Pydantic models for API request/response validation.
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, model_validator

from tennis_backend.database.models import MatchStatus, UserRole, VerificationStatus
from tennis_backend.utils.constants import (
    DEFAULT_GAMES_PER_SET,
    DEFAULT_SETS_PER_MATCH,
    MAX_SETS_PER_MATCH,
)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: bool
    message: str


# Auth


class SignupRequest(BaseModel):
    """Request to sign up a new user."""

    email: str
    password: str
    full_name: str
    role: UserRole = UserRole.PLAYER
    phone: Optional[str] = None

    @model_validator(mode="after")
    def validate_role(self):
        """Master accounts are never self-registered."""
        if self.role == UserRole.MASTER:
            raise ValueError("Role must be admin or player")
        return self


class LoginRequest(BaseModel):
    """Request to login with email and password."""

    email: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class UserResponse(BaseModel):
    """User information response."""

    id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    verification_status: VerificationStatus
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AuthResponse(BaseModel):
    """Authentication response with JWT token."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# Users


class CreateUserRequest(BaseModel):
    """Request from a manager to create an account."""

    email: str
    password: str
    full_name: str
    role: UserRole = UserRole.PLAYER
    phone: Optional[str] = None

    @model_validator(mode="after")
    def validate_role(self):
        if self.role == UserRole.MASTER:
            raise ValueError("Role must be admin or player")
        return self


class UpdateProfileRequest(BaseModel):
    """Request to update the current user's profile."""

    full_name: Optional[str] = None
    phone: Optional[str] = None


class UpdateVerificationStatusRequest(BaseModel):
    verification_status: VerificationStatus


class UpdateRoleRequest(BaseModel):
    role: UserRole


# Tournaments


class CreateTournamentRequest(BaseModel):
    """Request to create a tournament."""

    name: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    player_ids: List[int] = Field(default_factory=list)


class UpdateTournamentRequest(BaseModel):
    """
    Request to update a tournament. Omitted fields are left unchanged;
    clear_end_date removes the end date.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    clear_end_date: bool = False


# Matches


class CreateMatchRequest(BaseModel):
    """Request to schedule a new match."""

    tournament_id: int
    player1_id: int
    player2_id: int
    court: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    games_per_set: int = Field(default=DEFAULT_GAMES_PER_SET, ge=1)
    sets_per_match: int = Field(default=DEFAULT_SETS_PER_MATCH, ge=1, le=MAX_SETS_PER_MATCH)
    player1_score: int = Field(default=0, ge=0)
    player2_score: int = Field(default=0, ge=0)
    is_completed: bool = False


class UpdateMatchRequest(BaseModel):
    """
    Request to edit a match. Omitted fields are left unchanged;
    clear_court and clear_scheduled_time remove those values.
    """

    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    court: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    games_per_set: Optional[int] = Field(default=None, ge=1)
    sets_per_match: Optional[int] = Field(default=None, ge=1, le=MAX_SETS_PER_MATCH)
    player1_score: Optional[int] = Field(default=None, ge=0)
    player2_score: Optional[int] = Field(default=None, ge=0)
    clear_court: bool = False
    clear_scheduled_time: bool = False


class UpdateMatchStatusRequest(BaseModel):
    status: MatchStatus


class UpdateMatchScoreRequest(BaseModel):
    """Aggregate game totals for a finished match."""

    player1_score: int = Field(ge=0)
    player2_score: int = Field(ge=0)


class MatchSetInput(BaseModel):
    set_number: int = Field(ge=1)
    player1_games: int = Field(ge=0)
    player2_games: int = Field(ge=0)


class UpdateMatchSetsRequest(BaseModel):
    """Full set-by-set result of a match."""

    sets: List[MatchSetInput] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_set_numbers(self):
        numbers = [s.set_number for s in self.sets]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Set numbers must be unique")
        return self

