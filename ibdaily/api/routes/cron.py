import logging
import uuid
from dataclasses import dataclass

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_db, require_cron, settings
from ibdaily.models import Cohort, CohortMember, CohortStatus, ReminderLog, ReminderType, Submission, User
from ibdaily.schemas import ReminderResult, ReminderRunResponse
from ibdaily.services.email import EmailMessage, is_email_configured, render_reminder_email, send_email
from ibdaily.services.reminders import ReminderPrefs, minutes_until_deadline, should_send_reminder
from ibdaily.utils.time import india_date_key, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


@dataclass(frozen=True)
class ReminderCandidate:
    user: User
    cohort: Cohort
    prefs: ReminderPrefs


def find_candidates(db: Session, date_key: str) -> list[ReminderCandidate]:
    """Members of trial/active cohorts with no submission for date_key."""
    submitted = exists().where(
        Submission.user_id == CohortMember.user_id,
        Submission.cohort_id == CohortMember.cohort_id,
        Submission.date_key == date_key,
    )
    members = (
        db.query(CohortMember)
        .join(Cohort, Cohort.id == CohortMember.cohort_id)
        .filter(Cohort.status.in_([CohortStatus.active, CohortStatus.trial]), ~submitted)
        .all()
    )
    return [
        ReminderCandidate(
            user=member.user,
            cohort=member.cohort,
            prefs=ReminderPrefs.from_record(member.user.notification_prefs),
        )
        for member in members
    ]


def sent_today(db: Session, date_key: str) -> dict[tuple, set[ReminderType]]:
    sent: dict[tuple, set[ReminderType]] = {}
    for log in db.query(ReminderLog).filter(ReminderLog.date_key == date_key).all():
        sent.setdefault((log.user_id, log.cohort_id), set()).add(log.type)
    return sent


def record_reminder(
    db: Session, user_id: uuid.UUID, cohort_id: uuid.UUID, date_key: str, reminder_type: ReminderType
) -> None:
    db.add(ReminderLog(user_id=user_id, cohort_id=cohort_id, date_key=date_key, type=reminder_type))
    try:
        db.commit()
    except IntegrityError:
        # an overlapping run already logged this reminder
        db.rollback()
        logger.warning("Reminder %s for user %s already logged for %s", reminder_type.value, user_id, date_key)


def run_reminders(db: Session) -> ReminderRunResponse:
    if not is_email_configured(settings):
        return ReminderRunResponse(message="Email not configured, skipping reminders")

    now = utcnow()
    date_key = india_date_key(now)
    minutes_left = minutes_until_deadline(now)
    if minutes_left <= 0:
        return ReminderRunResponse(message="Past deadline, no reminders needed")

    candidates = find_candidates(db, date_key)
    already_sent = sent_today(db, date_key)
    results = []
    for candidate in candidates:
        user, cohort = candidate.user, candidate.cohort
        if not user.email:
            continue

        reminder_type = should_send_reminder(
            has_submitted_today=False,
            prefs=candidate.prefs,
            already_sent=already_sent.get((user.id, cohort.id), frozenset()),
            now=now,
        )
        if reminder_type is None:
            continue

        subject, html, text = render_reminder_email(
            user.name,
            cohort.name,
            minutes_left,
            is_last_call=reminder_type == ReminderType.last_call,
            base_url=settings.app_base_url,
        )
        outcome = send_email(EmailMessage(to=user.email, subject=subject, html=html, text=text), settings)
        if outcome.success:
            record_reminder(db, user.id, cohort.id, date_key, reminder_type)
        results.append(
            ReminderResult(user_id=user.id, cohort_id=cohort.id, type=reminder_type.value, success=outcome.success)
        )

    sent = sum(1 for result in results if result.success)
    logger.info("Reminders for %s: %s candidates, %s sent", date_key, len(candidates), sent)
    return ReminderRunResponse(
        date_key=date_key,
        minutes_until_deadline=minutes_left,
        candidates_found=len(candidates),
        sent=sent,
        results=results,
    )


@router.post("/send-reminders", response_model=ReminderRunResponse, dependencies=[Depends(require_cron)])
def send_reminders(db: Session = Depends(get_db)) -> ReminderRunResponse:
    return run_reminders(db)


@router.get("/send-reminders", response_model=ReminderRunResponse)
def send_reminders_manual(
    authorization: str | None = Header(default=None), db: Session = Depends(get_db)
) -> ReminderRunResponse:
    if not settings.is_development:
        raise HTTPException(status_code=405, detail="Method not allowed")
    require_cron(authorization)
    return run_reminders(db)
