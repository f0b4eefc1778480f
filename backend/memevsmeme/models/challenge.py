from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Text, Index, func, text
from memevsmeme.db import Base
from memevsmeme.services.clock import utcnow

class Challenge(Base):
    """Official daily challenge or user-created battle (is_user_created)."""
    __tablename__ = "daily_challenges"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prompt_id: Mapped[str] = mapped_column(String(32), nullable=False)  # e.g. P001, UC123456
    title: Mapped[str | None] = mapped_column(Text())
    prompt_text: Mapped[str] = mapped_column(Text(), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=text("true"))
    max_submissions: Mapped[int] = mapped_column(Integer, nullable=False, default=50, server_default="50")
    style: Mapped[str | None] = mapped_column(String(64))
    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default="public", server_default="public")  # public|private
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    is_user_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    # UTC date of `date` for official challenges, NULL for community ones.
    # A deactivated or expired row gives its day up so the resolver can replace it.
    day_key: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index(
            "uq_official_challenge_day",
            "day_key",
            unique=True,
            postgresql_where=text("is_user_created = false"),
            sqlite_where=text("is_user_created = 0"),
        ),
    )
