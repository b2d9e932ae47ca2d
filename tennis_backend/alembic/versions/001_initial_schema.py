"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2025-03-02 10:00:00.000000

Creates users, tournaments, tournament_players, matches and match_sets
with their enum types and indexes.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("master", "admin", "player", name="userrole")
verification_status = sa.Enum("pending", "approved", "rejected", name="verificationstatus")
match_status = sa.Enum("scheduled", "in_progress", "completed", name="matchstatus")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="player"),
        sa.Column(
            "verification_status", verification_status, nullable=False, server_default="approved"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("idx_users_email", "users", ["email"])
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "tournaments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "end_date IS NULL OR end_date >= start_date", name="ck_tournaments_date_order"
        ),
    )
    op.create_index("idx_tournaments_start_date", "tournaments", ["start_date"])

    op.create_table(
        "tournament_players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "tournament_id",
            sa.Integer(),
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "player_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("tournament_id", "player_id", name="uq_tournament_players"),
    )
    op.create_index(
        "idx_tournament_players_tournament", "tournament_players", ["tournament_id"]
    )

    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "tournament_id",
            sa.Integer(),
            sa.ForeignKey("tournaments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "player1_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "player2_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("court", sa.String(), nullable=True),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("games_per_set", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("sets_per_match", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("player1_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("player2_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "winner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("status", match_status, nullable=False, server_default="scheduled"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("player1_id != player2_id", name="ck_matches_distinct_players"),
    )
    op.create_index("idx_matches_tournament", "matches", ["tournament_id"])
    op.create_index("idx_matches_status", "matches", ["status"])

    op.create_table(
        "match_sets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "match_id", sa.Integer(), sa.ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("player1_games", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("player2_games", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("match_id", "set_number", name="uq_match_sets_number"),
    )
    op.create_index("idx_match_sets_match", "match_sets", ["match_id"])


def downgrade() -> None:
    op.drop_table("match_sets")
    op.drop_table("matches")
    op.drop_table("tournament_players")
    op.drop_table("tournaments")
    op.drop_table("users")

    bind = op.get_bind()
    match_status.drop(bind, checkfirst=True)
    verification_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
