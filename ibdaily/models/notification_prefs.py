import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ibdaily.db.base import Base

DEFAULT_REMIND_MINUTES = 90
DEFAULT_LAST_CALL_MINUTES = 15


class NotificationPrefs(Base):
    __tablename__ = "notification_prefs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    remind_minutes_before_cutoff: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_REMIND_MINUTES, nullable=False
    )
    last_call_minutes_before_cutoff: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_LAST_CALL_MINUTES, nullable=False
    )
    quiet_hours_start: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quiet_hours_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user = relationship("User", back_populates="notification_prefs")
