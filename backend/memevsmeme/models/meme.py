from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, Text, DateTime, ForeignKey, func
from memevsmeme.db import Base
from memevsmeme.services.clock import utcnow


class Meme(Base):
    __tablename__ = "memes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prompt_text: Mapped[str] = mapped_column(Text(), nullable=False)
    image_url: Mapped[str] = mapped_column(Text(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True, nullable=False)

    # anonymous memes have no creator; standalone memes have no challenge
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    daily_challenge_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("daily_challenges.id", ondelete="SET NULL"), index=True, nullable=True
    )

    # counters only ever move up, via single-statement increments
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
