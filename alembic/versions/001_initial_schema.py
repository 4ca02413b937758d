"""Initial Schema

Creates the LearnLoop tables:
- users, user_preferences: Accounts and per-user settings
- categories, topics, learning_paths, path_progress: Topic catalog
- learning_sessions, flashcards, mcqs: Learning sessions and generated items
- learning_digests: Weekly per-user summaries

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ===========================================
    # Accounts
    # ===========================================
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "weekly_digest_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column("theme", sa.String(20), nullable=False, server_default="light"),
    )

    # ===========================================
    # Topic Catalog
    # ===========================================
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "topics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("popularity", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_topics_category_id", "topics", ["category_id"])

    op.create_table(
        "learning_paths",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "path_progress",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "path_id",
            sa.Integer(),
            sa.ForeignKey("learning_paths.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_path_progress_user_id", "path_progress", ["user_id"])

    # ===========================================
    # Learning Sessions
    # ===========================================
    op.create_table(
        "learning_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("topic", sa.String(500), nullable=False),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress_type", sa.String(20), nullable=True),
        sa.Column("progress_index", sa.Integer(), nullable=True),
        sa.Column("progress_data", sa.JSON(), nullable=True),
    )
    op.create_index("ix_learning_sessions_user_id", "learning_sessions", ["user_id"])
    op.create_index(
        "ix_learning_sessions_created_at", "learning_sessions", ["created_at"]
    )

    op.create_table(
        "flashcards",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "session_id",
            sa.String(36),
            sa.ForeignKey("learning_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
    )
    op.create_index("ix_flashcards_session_id", "flashcards", ["session_id"])

    op.create_table(
        "mcqs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "session_id",
            sa.String(36),
            sa.ForeignKey("learning_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("correct_answer", sa.String(1), nullable=False),
    )
    op.create_index("ix_mcqs_session_id", "mcqs", ["session_id"])

    # ===========================================
    # Weekly Digests
    # ===========================================
    op.create_table(
        "learning_digests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("week_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("week_end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "completed_sessions", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("average_score", sa.Float(), nullable=True),
        sa.Column(
            "total_time_spent_minutes",
            sa.Integer(),
            nullable=False,
            server_default="0",
        ),
        sa.Column("top_category", sa.String(100), nullable=True),
        sa.Column("top_performing_topic", sa.String(500), nullable=True),
        sa.Column("improvement_areas", sa.Text(), nullable=True),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("insights", sa.JSON(), nullable=False),
        sa.Column("recommendations", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "user_id", "week_start_date", name="uq_learning_digests_user_week"
        ),
    )
    op.create_index("ix_learning_digests_user_id", "learning_digests", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_learning_digests_user_id", table_name="learning_digests")
    op.drop_table("learning_digests")

    op.drop_index("ix_mcqs_session_id", table_name="mcqs")
    op.drop_table("mcqs")
    op.drop_index("ix_flashcards_session_id", table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index("ix_learning_sessions_created_at", table_name="learning_sessions")
    op.drop_index("ix_learning_sessions_user_id", table_name="learning_sessions")
    op.drop_table("learning_sessions")

    op.drop_index("ix_path_progress_user_id", table_name="path_progress")
    op.drop_table("path_progress")
    op.drop_table("learning_paths")
    op.drop_index("ix_topics_category_id", table_name="topics")
    op.drop_table("topics")
    op.drop_table("categories")

    op.drop_table("user_preferences")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
