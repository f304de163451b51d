from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from telemed_realtime.infrastructure.db.base import Base


class UserModel(Base):
    """Read-only view of the platform's user table."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    avatar: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    specialization: Mapped[str | None] = mapped_column(String(200), nullable=True)
