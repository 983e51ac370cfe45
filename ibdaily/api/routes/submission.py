import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ibdaily.api.deps import enforce_rate_limit, get_current_user, get_db, require_membership, submission_limiter
from ibdaily.models import Submission, User
from ibdaily.schemas import SubmissionOut, SubmissionRequest, SubmissionSavedResponse, TodaySubmissionResponse
from ibdaily.services.cohorts import refresh_cohort_status
from ibdaily.services.quality import check_submission_quality
from ibdaily.utils.time import compute_on_time, india_date_key, utcnow, yesterday_date_key

router = APIRouter(prefix="/submission", tags=["submission"])

LOCK_REASON = "Trial has ended. Activate membership to continue submitting."


def serialize_submission(submission: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=submission.id,
        date_key=submission.date_key,
        subject=submission.subject,
        bullet1=submission.bullet1,
        bullet2=submission.bullet2,
        bullet3=submission.bullet3,
        quality_status=submission.quality_status.value,
        quality_reasons=submission.quality_reasons or [],
        created_at=submission.created_at,
        on_time=compute_on_time(submission.created_at, submission.date_key),
    )


def find_submission(db: Session, user_id: uuid.UUID, cohort_id: uuid.UUID, date_key: str) -> Submission | None:
    return (
        db.query(Submission)
        .filter(
            Submission.user_id == user_id,
            Submission.cohort_id == cohort_id,
            Submission.date_key == date_key,
        )
        .first()
    )


@router.get("", response_model=TodaySubmissionResponse)
def today_submission(
    cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> TodaySubmissionResponse:
    membership = require_membership(db, user, cohort_id)
    info = refresh_cohort_status(db, membership.cohort)
    today_key = india_date_key()
    submission = find_submission(db, user.id, cohort_id, today_key)

    return TodaySubmissionResponse(
        today_key=today_key,
        submission=serialize_submission(submission) if submission else None,
        cohort_status=info.status.value,
        can_submit=info.can_submit,
        lock_reason=None if info.can_submit else LOCK_REASON,
    )


@router.post("", response_model=SubmissionSavedResponse)
def save_submission(
    payload: SubmissionRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> SubmissionSavedResponse:
    enforce_rate_limit(submission_limiter, str(user.id))

    bullets = [payload.bullet1.strip(), payload.bullet2.strip(), payload.bullet3.strip()]
    if not any(bullets):
        raise HTTPException(status_code=400, detail="At least one bullet point is required")

    now = utcnow()
    yesterday = find_submission(db, user.id, payload.cohort_id, yesterday_date_key(now))
    result = check_submission_quality(bullets, yesterday.bullets if yesterday else None)
    if result.validation_errors:
        raise HTTPException(
            status_code=400,
            detail={"message": "Submission does not meet requirements", "errors": result.validation_errors},
        )

    membership = require_membership(db, user, payload.cohort_id)
    info = refresh_cohort_status(db, membership.cohort, now)
    if not info.can_submit:
        raise HTTPException(status_code=403, detail=LOCK_REASON)

    today_key = india_date_key(now)
    submission = find_submission(db, user.id, payload.cohort_id, today_key)
    if submission is None:
        submission = Submission(user_id=user.id, cohort_id=payload.cohort_id, date_key=today_key, created_at=now)
        db.add(submission)
    submission.subject = payload.subject.strip()
    submission.bullet1, submission.bullet2, submission.bullet3 = bullets
    submission.quality_status = result.status
    submission.quality_reasons = list(result.reasons)
    db.commit()
    db.refresh(submission)

    return SubmissionSavedResponse(
        submission=serialize_submission(submission),
        quality_status=result.status.value,
        quality_reasons=result.reasons,
    )
