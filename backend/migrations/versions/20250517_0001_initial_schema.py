from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20250517_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("avatar_seed", sa.String(length=100), nullable=True),
        sa.Column("avatar_style", sa.String(length=50), nullable=True),
        sa.Column("avatar_background_color", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "daily_challenges",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("prompt_id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("prompt_text", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("max_submissions", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("style", sa.String(length=64), nullable=True),
        sa.Column("visibility", sa.String(length=16), nullable=False, server_default="public"),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("is_user_created", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("day_key", sa.String(length=10), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_daily_challenges_date", "daily_challenges", ["date"])
    op.create_index("ix_daily_challenges_user_id", "daily_challenges", ["user_id"])
    # one official challenge per UTC day; lazy rollover relies on it
    op.create_index(
        "uq_official_challenge_day", "daily_challenges", ["day_key"], unique=True,
        postgresql_where=sa.text("is_user_created = false"),
    )

    op.create_table(
        "memes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("prompt_text", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("daily_challenge_id", sa.Integer(), sa.ForeignKey("daily_challenges.id", ondelete="SET NULL"), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_memes_created_at", "memes", ["created_at"])
    op.create_index("ix_memes_user_id", "memes", ["user_id"])
    op.create_index("ix_memes_daily_challenge_id", "memes", ["daily_challenge_id"])

    op.create_table(
        "battles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("meme_one_id", sa.Integer(), sa.ForeignKey("memes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("meme_two_id", sa.Integer(), sa.ForeignKey("memes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("winner_id", sa.Integer(), sa.ForeignKey("memes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_battles_meme_one_id", "battles", ["meme_one_id"])
    op.create_index("ix_battles_meme_two_id", "battles", ["meme_two_id"])

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("meme_id", sa.Integer(), sa.ForeignKey("memes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("battle_id", sa.Integer(), sa.ForeignKey("battles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_votes_meme_id", "votes", ["meme_id"])
    op.create_index("ix_votes_battle_id", "votes", ["battle_id"])

    op.create_table(
        "templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("meme_id", sa.Integer(), sa.ForeignKey("memes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_comments_meme_id", "comments", ["meme_id"])

def downgrade() -> None:
    op.drop_index("ix_comments_meme_id", table_name="comments")
    op.drop_table("comments")
    op.drop_table("templates")
    op.drop_index("ix_votes_battle_id", table_name="votes")
    op.drop_index("ix_votes_meme_id", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_battles_meme_two_id", table_name="battles")
    op.drop_index("ix_battles_meme_one_id", table_name="battles")
    op.drop_table("battles")
    op.drop_index("ix_memes_daily_challenge_id", table_name="memes")
    op.drop_index("ix_memes_user_id", table_name="memes")
    op.drop_index("ix_memes_created_at", table_name="memes")
    op.drop_table("memes")
    op.drop_index("uq_official_challenge_day", table_name="daily_challenges")
    op.drop_index("ix_daily_challenges_user_id", table_name="daily_challenges")
    op.drop_index("ix_daily_challenges_date", table_name="daily_challenges")
    op.drop_table("daily_challenges")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
