"""
User service layer for account, profile and role database operations.
"""

from typing import Optional, Dict, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_
from tennis_backend.database.models import (
    User,
    UserRole,
    VerificationStatus,
    Tournament,
    TournamentPlayer,
    Match,
    MatchSet,
)
from tennis_backend.services.presentation_service import user_to_dict
import logging

logger = logging.getLogger(__name__)


def initial_verification_status(role: UserRole) -> VerificationStatus:
    """Admin accounts wait for approval; everybody else is approved on creation."""
    if role == UserRole.ADMIN:
        return VerificationStatus.PENDING
    return VerificationStatus.APPROVED


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    full_name: str,
    role: UserRole = UserRole.PLAYER,
    phone: Optional[str] = None,
) -> Dict:
    """
    Create a new user account.

    Credentials and profile live in the same row, so there is no window in
    which an account exists without a profile.

    Args:
        session: Database session
        email: Normalized (lower-case) email address
        password_hash: Required hashed password
        full_name: Display name
        role: Account role
        phone: Optional phone number

    Returns:
        Created user dictionary

    Raises:
        ValueError: If the email is already registered
    """
    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValueError(f"Email {email} is already registered")

    role = UserRole(role)
    new_user = User(
        email=email,
        password_hash=password_hash,
        full_name=full_name,
        phone=phone,
        role=role,
        verification_status=initial_verification_status(role),
    )
    session.add(new_user)
    await session.flush()
    await session.commit()
    await session.refresh(new_user)

    logger.info(f"Created user {new_user.id} with role {role.value}")
    return user_to_dict(new_user)


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    return user_to_dict(user) if user else None


async def get_user_by_email(
    session: AsyncSession, email: str, include_password_hash: bool = False
) -> Optional[Dict]:
    """
    Get user by email address.

    Args:
        session: Database session
        email: Email address (will be normalized to lowercase)
        include_password_hash: Include the hash (for login only)

    Returns:
        User dictionary or None if not found
    """
    email = email.strip().lower() if email else None
    if not email:
        return None

    result = await session.execute(
        select(User)
        .where(func.lower(User.email) == email)
        .limit(1)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    return user_to_dict(user, include_password_hash=include_password_hash) if user else None


async def get_password_hash(session: AsyncSession, user_id: int) -> Optional[str]:
    result = await session.execute(select(User.password_hash).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> List[Dict]:
    """All users, newest first."""
    result = await session.execute(
        select(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .execution_options(populate_existing=True)
    )
    return [user_to_dict(u) for u in result.scalars().all()]


async def list_players(session: AsyncSession) -> List[Dict]:
    """Users who can take part in matches (players and admins), ordered by name."""
    result = await session.execute(
        select(User)
        .where(User.role.in_([UserRole.PLAYER, UserRole.ADMIN]))
        .order_by(User.full_name.asc(), User.id.asc())
        .execution_options(populate_existing=True)
    )
    return [user_to_dict(u) for u in result.scalars().all()]


async def get_player_users(session: AsyncSession) -> List[User]:
    """ORM users with role player, in id order (leaderboard player store)."""
    result = await session.execute(
        select(User).where(User.role == UserRole.PLAYER).order_by(User.id.asc())
    )
    return list(result.scalars().all())


async def update_profile(
    session: AsyncSession,
    user_id: int,
    full_name: Optional[str] = None,
    phone: Optional[str] = None,
) -> Optional[Dict]:
    """
    Update a user's own profile fields.

    Returns:
        Updated user dictionary, or None if the user does not exist
    """
    update_values = {"updated_at": func.now()}
    if full_name is not None:
        update_values["full_name"] = full_name.strip()
    if phone is not None:
        update_values["phone"] = phone.strip() or None

    result = await session.execute(update(User).where(User.id == user_id).values(**update_values))
    await session.commit()
    if result.rowcount == 0:
        return None
    return await get_user_by_id(session, user_id)


async def update_user_password(session: AsyncSession, user_id: int, password_hash: str) -> bool:
    """
    Update a user's password.

    Returns:
        True if successful, False otherwise
    """
    result = await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(password_hash=password_hash, updated_at=func.now())
    )
    await session.commit()
    return result.rowcount > 0


async def update_verification_status(
    session: AsyncSession, user_id: int, verification_status: VerificationStatus
) -> Optional[Dict]:
    """Set the approval state of an account."""
    verification_status = VerificationStatus(verification_status)
    result = await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(verification_status=verification_status, updated_at=func.now())
    )
    await session.commit()
    if result.rowcount == 0:
        return None
    logger.info(f"User {user_id} verification status set to {verification_status.value}")
    return await get_user_by_id(session, user_id)


async def update_role(session: AsyncSession, user_id: int, role: UserRole) -> Optional[Dict]:
    """
    Change a user's role.

    Promotion to admin resets the account to pending, the same gate a
    self-registered admin goes through.
    """
    role = UserRole(role)
    values = {"role": role, "updated_at": func.now()}
    if role == UserRole.ADMIN:
        values["verification_status"] = VerificationStatus.PENDING
    elif role == UserRole.PLAYER:
        values["verification_status"] = VerificationStatus.APPROVED

    result = await session.execute(update(User).where(User.id == user_id).values(**values))
    await session.commit()
    if result.rowcount == 0:
        return None
    logger.info(f"User {user_id} role set to {role.value}")
    return await get_user_by_id(session, user_id)


async def delete_user(session: AsyncSession, user_id: int) -> bool:
    """
    Delete a user together with their roster entries and matches.

    Tournaments the user created are kept with created_by cleared.

    Returns:
        True if the user existed
    """
    result = await session.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        return False

    match_ids = select(Match.id).where(
        or_(Match.player1_id == user_id, Match.player2_id == user_id)
    )
    await session.execute(delete(MatchSet).where(MatchSet.match_id.in_(match_ids)))
    await session.execute(
        delete(Match).where(or_(Match.player1_id == user_id, Match.player2_id == user_id))
    )
    await session.execute(delete(TournamentPlayer).where(TournamentPlayer.player_id == user_id))
    await session.execute(
        update(Tournament).where(Tournament.created_by == user_id).values(created_by=None)
    )
    await session.execute(delete(User).where(User.id == user_id))
    await session.commit()

    logger.info(f"Deleted user {user_id}")
    return True


async def ensure_master_user(
    session: AsyncSession, email: str, password_hash: str, full_name: str
) -> Tuple[Dict, bool]:
    """
    Create the master account unless it already exists.

    An existing account with the email is promoted to master and approved.

    Returns:
        (user dictionary, created)
    """
    existing = await get_user_by_email(session, email)
    if existing:
        if existing["role"] != UserRole.MASTER.value:
            await session.execute(
                update(User)
                .where(User.id == existing["id"])
                .values(
                    role=UserRole.MASTER,
                    verification_status=VerificationStatus.APPROVED,
                    updated_at=func.now(),
                )
            )
            await session.commit()
            logger.info(f"Promoted user {existing['id']} to master")
            existing = await get_user_by_id(session, existing["id"])
        return existing, False

    user = await create_user(
        session, email=email, password_hash=password_hash, full_name=full_name, role=UserRole.MASTER
    )
    return user, True
