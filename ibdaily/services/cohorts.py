import logging
import secrets
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from ibdaily.models import AuditLog, Cohort, CohortMember, CohortStatus, MemberRole, Subscription, User
from ibdaily.services.cohort_status import CohortStatusInfo, compute_cohort_status, compute_trial_end_date
from ibdaily.services.subscription import SubscriptionSnapshot, is_subscription_active
from ibdaily.utils.time import utcnow

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6
JOIN_CODE_ATTEMPTS = 10


class JoinCodeExhausted(Exception):
    pass


def generate_join_code() -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


def unique_join_code(db: Session) -> str:
    for _ in range(JOIN_CODE_ATTEMPTS):
        code = generate_join_code()
        if not db.query(Cohort.id).filter(Cohort.join_code == code).first():
            return code
    raise JoinCodeExhausted("Could not allocate a unique join code")


def get_membership(db: Session, user_id: uuid.UUID, cohort_id: uuid.UUID) -> CohortMember | None:
    return (
        db.query(CohortMember)
        .filter(CohortMember.user_id == user_id, CohortMember.cohort_id == cohort_id)
        .first()
    )


def count_paid_members(db: Session, cohort_id: uuid.UUID, now: datetime | None = None) -> tuple[int, int]:
    """Return (paid_count, member_count) for a cohort."""
    now = now or utcnow()
    rows = (
        db.query(CohortMember, Subscription)
        .outerjoin(Subscription, Subscription.user_id == CohortMember.user_id)
        .filter(CohortMember.cohort_id == cohort_id)
        .all()
    )
    paid = sum(
        1 for _, subscription in rows if is_subscription_active(SubscriptionSnapshot.from_record(subscription), now)
    )
    return paid, len(rows)


def refresh_cohort_status(db: Session, cohort: Cohort, now: datetime | None = None) -> CohortStatusInfo:
    """Recompute the effective status and persist it when it changed."""
    now = now or utcnow()
    paid_count, member_count = count_paid_members(db, cohort.id, now)
    info = compute_cohort_status(
        current_status=cohort.status,
        trial_ends_at=cohort.trial_ends_at,
        activated_at=cohort.activated_at,
        paid_count=paid_count,
        member_count=member_count,
        now=now,
    )

    if info.status != cohort.status:
        if info.status == CohortStatus.active and cohort.activated_at is None:
            cohort.activated_at = now
            logger.info("Cohort %s activated with %s paid members", cohort.id, paid_count)
            db.add(AuditLog(cohort_id=cohort.id, action="cohort_activated", meta={"paid_count": paid_count}))
        cohort.status = info.status
        db.commit()
    return info


def refresh_user_cohorts(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> None:
    cohorts = (
        db.query(Cohort)
        .join(CohortMember, CohortMember.cohort_id == Cohort.id)
        .filter(CohortMember.user_id == user_id)
        .all()
    )
    for cohort in cohorts:
        refresh_cohort_status(db, cohort, now)


def create_cohort(db: Session, owner: User, name: str, now: datetime | None = None) -> Cohort:
    now = now or utcnow()
    cohort = Cohort(
        name=name,
        join_code=unique_join_code(db),
        status=CohortStatus.trial,
        trial_ends_at=compute_trial_end_date(now),
    )
    db.add(cohort)
    db.flush()
    db.add(CohortMember(user_id=owner.id, cohort_id=cohort.id, role=MemberRole.owner))
    owner.active_cohort_id = cohort.id
    db.add(AuditLog(user_id=owner.id, cohort_id=cohort.id, action="cohort_create"))
    db.commit()
    db.refresh(cohort)
    return cohort


def join_cohort(db: Session, user: User, cohort: Cohort) -> bool:
    """Add the user to the cohort and make it active. Returns False if already a member."""
    existing = get_membership(db, user.id, cohort.id)
    user.active_cohort_id = cohort.id
    if existing:
        db.commit()
        return False

    db.add(CohortMember(user_id=user.id, cohort_id=cohort.id, role=MemberRole.member))
    db.add(AuditLog(user_id=user.id, cohort_id=cohort.id, action="cohort_join"))
    db.commit()
    return True
