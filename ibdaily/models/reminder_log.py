import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ibdaily.db.base import Base


class ReminderType(str, enum.Enum):
    remind = "remind"
    last_call = "last_call"


class ReminderLog(Base):
    __tablename__ = "reminder_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "cohort_id", "date_key", "type", name="uq_reminder_log_per_day"),
        Index("ix_reminder_logs_date_key_type", "date_key", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cohort_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cohorts.id", ondelete="CASCADE"), nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    type: Mapped[ReminderType] = mapped_column(Enum(ReminderType), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
