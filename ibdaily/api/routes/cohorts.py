import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_current_user, get_db, require_membership
from ibdaily.models import Cohort, CohortMember, MemberRole, User
from ibdaily.schemas import (
    CohortCreateRequest,
    CohortHealthResponse,
    CohortJoinRequest,
    CohortListResponse,
    CohortResponse,
    CohortStatusResponse,
    DailyStatsOut,
    MemberHealthOut,
    RetentionOut,
)
from ibdaily.services.cohort_health import CohortHealth, compute_cohort_health
from ibdaily.services.cohort_status import CohortStatusInfo, activation_counter_text, format_days_remaining
from ibdaily.services.cohorts import JoinCodeExhausted, create_cohort, join_cohort, refresh_cohort_status

router = APIRouter(prefix="/cohorts", tags=["cohorts"])


def serialize_status(cohort: Cohort, info: CohortStatusInfo) -> CohortStatusResponse:
    return CohortStatusResponse(
        cohort_id=cohort.id,
        cohort_name=cohort.name,
        status=info.status.value,
        trial_ends_at=info.trial_ends_at,
        activated_at=cohort.activated_at,
        paid_count=info.paid_count,
        member_count=info.member_count,
        is_trial_expired=info.is_trial_expired,
        days_until_trial_end=info.days_until_trial_end,
        days_remaining_text=format_days_remaining(info.days_until_trial_end),
        show_activation_counter=info.show_activation_counter,
        activation_counter_text=activation_counter_text(info.paid_count),
        can_submit=info.can_submit,
    )


def serialize_cohort(cohort: Cohort, user: User, **extra) -> CohortResponse:
    return CohortResponse(
        id=cohort.id,
        name=cohort.name,
        join_code=cohort.join_code,
        status=cohort.status.value,
        trial_ends_at=cohort.trial_ends_at,
        is_active=cohort.id == user.active_cohort_id,
        **extra,
    )


def serialize_health(cohort: Cohort, health: CohortHealth) -> CohortHealthResponse:
    return CohortHealthResponse(
        cohort_id=cohort.id,
        cohort_name=cohort.name,
        total_members=health.total_members,
        active_members=health.active_members,
        at_risk_members=health.at_risk_members,
        inactive_members=health.inactive_members,
        today_submission_rate=health.today_submission_rate,
        weekly_average_rate=health.weekly_average_rate,
        daily_stats=[
            DailyStatsOut(
                date_key=day.date_key,
                total_members=day.total_members,
                submitted_count=day.submitted_count,
                missed_count=day.missed_count,
                submission_rate=day.submission_rate,
            )
            for day in health.daily_stats
        ],
        member_health=[
            MemberHealthOut(
                user_id=entry.user_id,
                user_name=entry.user_name,
                user_email=entry.user_email,
                current_streak=entry.current_streak,
                submissions_last_7_days=entry.submissions_last_7_days,
                submissions_last_30_days=entry.submissions_last_30_days,
                last_submission_date=entry.last_submission_date,
                status=entry.status.value,
            )
            for entry in health.member_health
        ],
        retention=RetentionOut(d1=health.retention[1], d3=health.retention[3], d7=health.retention[7]),
    )


def get_cohort_or_404(db: Session, cohort_id: uuid.UUID) -> Cohort:
    cohort = db.query(Cohort).filter(Cohort.id == cohort_id).first()
    if not cohort:
        raise HTTPException(status_code=404, detail="Cohort not found")
    return cohort


@router.get("", response_model=CohortListResponse)
def list_cohorts(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> CohortListResponse:
    memberships = (
        db.query(CohortMember)
        .filter(CohortMember.user_id == user.id)
        .order_by(CohortMember.joined_at.asc())
        .all()
    )
    counts = dict(
        db.query(CohortMember.cohort_id, func.count(CohortMember.id))
        .filter(CohortMember.cohort_id.in_([m.cohort_id for m in memberships]))
        .group_by(CohortMember.cohort_id)
        .all()
    )

    cohorts = [
        serialize_cohort(
            m.cohort,
            user,
            member_count=counts.get(m.cohort_id, 0),
            role=m.role.value,
            joined_at=m.joined_at,
        )
        for m in memberships
    ]

    active_status = None
    active = next((m.cohort for m in memberships if m.cohort_id == user.active_cohort_id), None)
    if active is not None:
        active_status = serialize_status(active, refresh_cohort_status(db, active))

    return CohortListResponse(
        cohorts=cohorts,
        active_cohort_id=active.id if active is not None else None,
        active_cohort_status=active_status,
    )


@router.get("/{cohort_id}/status", response_model=CohortStatusResponse)
def cohort_status(
    cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CohortStatusResponse:
    require_membership(db, user, cohort_id)
    cohort = get_cohort_or_404(db, cohort_id)
    return serialize_status(cohort, refresh_cohort_status(db, cohort))


@router.get("/{cohort_id}/health", response_model=CohortHealthResponse)
def cohort_health(
    cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CohortHealthResponse:
    membership = require_membership(db, user, cohort_id)
    if membership.role != MemberRole.owner:
        raise HTTPException(status_code=403, detail="Only cohort owners can view health metrics")
    return serialize_health(membership.cohort, compute_cohort_health(db, membership.cohort))


@router.post("", response_model=CohortResponse, status_code=201)
def create(
    payload: CohortCreateRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CohortResponse:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    try:
        cohort = create_cohort(db, user, name)
    except JoinCodeExhausted as exc:
        raise HTTPException(status_code=503, detail="Could not allocate a join code") from exc
    return serialize_cohort(cohort, user, member_count=1, role="owner")


@router.post("/join", response_model=CohortResponse)
def join(
    payload: CohortJoinRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CohortResponse:
    code = payload.join_code.strip().upper()
    cohort = db.query(Cohort).filter(Cohort.join_code == code).first()
    if not cohort:
        raise HTTPException(status_code=404, detail="Invalid join code")

    joined = join_cohort(db, user, cohort)
    return serialize_cohort(cohort, user, already_member=not joined)


@router.post("/{cohort_id}/activate", response_model=CohortResponse)
def set_active(
    cohort_id: uuid.UUID, user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> CohortResponse:
    membership = require_membership(db, user, cohort_id)
    user.active_cohort_id = cohort_id
    db.commit()
    return serialize_cohort(membership.cohort, user, role=membership.role.value, joined_at=membership.joined_at)
