from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, DateTime, ForeignKey, func
from memevsmeme.db import Base
from memevsmeme.services.clock import utcnow

class Battle(Base):
    """Pairwise meme-vs-meme contest; winner is fixed by the first vote."""
    __tablename__ = "battles"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meme_one_id: Mapped[int] = mapped_column(Integer, ForeignKey("memes.id", ondelete="CASCADE"), index=True, nullable=False)
    meme_two_id: Mapped[int] = mapped_column(Integer, ForeignKey("memes.id", ondelete="CASCADE"), index=True, nullable=False)
    winner_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("memes.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

class Vote(Base):
    __tablename__ = "votes"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meme_id: Mapped[int] = mapped_column(Integer, ForeignKey("memes.id", ondelete="CASCADE"), index=True, nullable=False)
    battle_id: Mapped[int] = mapped_column(Integer, ForeignKey("battles.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
