"""
SQLAlchemy ORM models for the tennis tournament system.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tennis_backend.database.db import Base
from tennis_backend.utils.constants import DEFAULT_GAMES_PER_SET, DEFAULT_SETS_PER_MATCH


def _enum_values(enum_cls):
    """Persist enum values ("master") rather than member names ("MASTER")."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    """User role enum."""

    MASTER = "master"
    ADMIN = "admin"
    PLAYER = "player"


class VerificationStatus(str, enum.Enum):
    """Approval gate for admin accounts."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MatchStatus(str, enum.Enum):
    """Match lifecycle status enum."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class User(Base):
    """User accounts with email/password authentication and a role."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(
        Enum(UserRole, name="userrole", values_callable=_enum_values),
        nullable=False,
        default=UserRole.PLAYER,
    )
    verification_status = Column(
        Enum(VerificationStatus, name="verificationstatus", values_callable=_enum_values),
        nullable=False,
        default=VerificationStatus.APPROVED,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    created_tournaments = relationship("Tournament", back_populates="creator")
    tournament_entries = relationship("TournamentPlayer", back_populates="player")

    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_role", "role"),
    )


class Tournament(Base):
    """Tournaments. Status (upcoming/active/completed) is derived from the dates."""

    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", back_populates="created_tournaments")
    players = relationship("TournamentPlayer", back_populates="tournament")
    matches = relationship("Match", back_populates="tournament")

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date", name="ck_tournaments_date_order"
        ),
        Index("idx_tournaments_start_date", "start_date"),
    )


class TournamentPlayer(Base):
    """Players registered in a tournament (many-to-many join)."""

    __tablename__ = "tournament_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    player_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="players")
    player = relationship("User", back_populates="tournament_entries")

    __table_args__ = (
        UniqueConstraint("tournament_id", "player_id", name="uq_tournament_players"),
        Index("idx_tournament_players_tournament", "tournament_id"),
    )


class Match(Base):
    """Singles matches. player1_score/player2_score hold aggregate games won."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    player1_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    player2_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    court = Column(String, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), nullable=True)
    games_per_set = Column(Integer, nullable=False, default=DEFAULT_GAMES_PER_SET)
    sets_per_match = Column(Integer, nullable=False, default=DEFAULT_SETS_PER_MATCH)
    player1_score = Column(Integer, nullable=False, default=0)
    player2_score = Column(Integer, nullable=False, default=0)
    winner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        Enum(MatchStatus, name="matchstatus", values_callable=_enum_values),
        nullable=False,
        default=MatchStatus.SCHEDULED,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="matches")
    player1 = relationship("User", foreign_keys=[player1_id])
    player2 = relationship("User", foreign_keys=[player2_id])
    winner = relationship("User", foreign_keys=[winner_id])
    sets = relationship("MatchSet", back_populates="match", order_by="MatchSet.set_number")

    __table_args__ = (
        CheckConstraint("player1_id != player2_id", name="ck_matches_distinct_players"),
        Index("idx_matches_tournament", "tournament_id"),
        Index("idx_matches_status", "status"),
    )

    @property
    def player_ids(self):
        """(player1_id, player2_id)"""
        return (self.player1_id, self.player2_id)


class MatchSet(Base):
    """Per-set game tallies of a match."""

    __tablename__ = "match_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    set_number = Column(Integer, nullable=False)
    player1_games = Column(Integer, nullable=False, default=0)
    player2_games = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    match = relationship("Match", back_populates="sets")

    __table_args__ = (
        UniqueConstraint("match_id", "set_number", name="uq_match_sets_number"),
        Index("idx_match_sets_match", "match_id"),
    )
