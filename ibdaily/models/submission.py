import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ibdaily.db.base import Base


class QualityStatus(str, enum.Enum):
    good = "good"
    low_effort = "low_effort"


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("user_id", "cohort_id", "date_key", name="uq_submission_user_cohort_day"),
        Index("ix_submissions_cohort_date_key", "cohort_id", "date_key"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cohort_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("cohorts.id", ondelete="CASCADE"), nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    bullet1: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    bullet2: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    bullet3: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    quality_status: Mapped[QualityStatus] = mapped_column(
        Enum(QualityStatus), nullable=False, default=QualityStatus.good
    )
    quality_reasons: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user = relationship("User")

    @property
    def bullets(self) -> list[str]:
        return [self.bullet1, self.bullet2, self.bullet3]
