"""Initial schema — users, movies, reviews, usermovies

Revision ID: 0001
Revises: —
Create Date: 2026-10-17 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────────
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ── Enum types ────────────────────────────────────────────────────────────
    op.execute(
        "CREATE TYPE watch_status AS ENUM "
        "('planned_to_watch', 'watching', 'watched', 'dropped')"
    )

    # ── Trigger function (auto-update updated_at) ─────────────────────────────
    op.execute("""
        CREATE OR REPLACE FUNCTION set_updated_at()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
          NEW.updated_at = now();
          RETURN NEW;
        END;
        $$
    """)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("github_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("github_username", sa.String(64), nullable=True),
        # GitHub may hide the address, so NULL is allowed; duplicates are not
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("github_id", name="uq_users_github_id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_github_id", "users", ["github_id"])

    op.execute("""
        CREATE TRIGGER trg_users_updated_at
        BEFORE UPDATE ON users
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)

    # ── movies ────────────────────────────────────────────────────────────────
    op.create_table(
        "movies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("rating", sa.String(16), nullable=True),
        sa.Column("genre", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("length", sa.Integer, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("director", sa.String(255), nullable=True),
        sa.Column("poster_url", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("title", "year", name="uq_movies_title_year"),
        sa.CheckConstraint("year >= 1888", name="chk_movies_year"),
        sa.CheckConstraint("length IS NULL OR length >= 0", name="chk_movies_length"),
        sa.CheckConstraint("jsonb_typeof(genre) = 'array'", name="chk_movies_genre_array"),
    )
    op.create_index("ix_movies_title", "movies", ["title"])
    op.execute("""
        CREATE INDEX idx_movies_genre_gin
          ON movies
          USING GIN (genre jsonb_path_ops)
    """)

    op.execute("""
        CREATE TRIGGER trg_movies_updated_at
        BEFORE UPDATE ON movies
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)

    # ── reviews ───────────────────────────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        # RESTRICT: a reviewed movie cannot be deleted
        sa.Column("movie_id", UUID(as_uuid=True),
                  sa.ForeignKey("movies.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("movie_id", "user_id", name="uq_reviews_movie_user"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="chk_reviews_rating"),
        sa.CheckConstraint(
            "length(btrim(message)) BETWEEN 1 AND 5000",
            name="chk_reviews_message_len",
        ),
    )
    op.create_index("ix_reviews_movie_id", "reviews", ["movie_id"])
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])

    op.execute("""
        CREATE TRIGGER trg_reviews_updated_at
        BEFORE UPDATE ON reviews
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)

    # ── usermovies ────────────────────────────────────────────────────────────
    op.create_table(
        "usermovies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("movie_id", UUID(as_uuid=True),
                  sa.ForeignKey("movies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="planned_to_watch"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("user_id", "movie_id", name="uq_usermovies_user_movie"),
    )
    # Convert status text column to enum
    op.execute("ALTER TABLE usermovies ALTER COLUMN status DROP DEFAULT")
    op.execute(
        "ALTER TABLE usermovies ALTER COLUMN status TYPE watch_status USING status::watch_status"
    )
    op.execute("ALTER TABLE usermovies ALTER COLUMN status SET DEFAULT 'planned_to_watch'")
    op.create_index("ix_usermovies_user_id", "usermovies", ["user_id"])
    op.create_index("ix_usermovies_movie_id", "usermovies", ["movie_id"])

    op.execute("""
        CREATE TRIGGER trg_usermovies_updated_at
        BEFORE UPDATE ON usermovies
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)


def downgrade() -> None:
    op.drop_table("usermovies")
    op.drop_table("reviews")
    op.drop_table("movies")
    op.drop_table("users")
    op.execute("DROP FUNCTION IF EXISTS set_updated_at()")
    op.execute("DROP TYPE IF EXISTS watch_status")
