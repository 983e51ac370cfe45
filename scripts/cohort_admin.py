import argparse
from datetime import timedelta

from ibdaily.db import SessionLocal
from ibdaily.models import Cohort, CohortMember, CohortStatus, User
from ibdaily.services.cohort_status import compute_cohort_status, format_days_remaining
from ibdaily.services.cohorts import count_paid_members, create_cohort
from ibdaily.utils.time import as_utc, utcnow


def find_cohort(db, join_code: str) -> Cohort | None:
    return db.query(Cohort).filter(Cohort.join_code == join_code.strip().upper()).first()


def print_cohort(db, cohort: Cohort) -> None:
    paid_count, member_count = count_paid_members(db, cohort.id)
    info = compute_cohort_status(cohort.status, cohort.trial_ends_at, cohort.activated_at, paid_count, member_count)
    print(f"name: {cohort.name}")
    print(f"join_code: {cohort.join_code}")
    print(f"status: {cohort.status.value} (effective: {info.status.value})")
    print(f"trial_ends_at: {as_utc(cohort.trial_ends_at).isoformat()}")
    if cohort.activated_at:
        print(f"activated_at: {as_utc(cohort.activated_at).isoformat()}")
    elif info.status == CohortStatus.trial:
        print(f"trial: {format_days_remaining(info.days_until_trial_end)}")
    print(f"members: {info.member_count} ({info.paid_count} paid)")


def list_cohorts(db, status: str | None) -> int:
    query = db.query(Cohort)
    if status:
        query = query.filter(Cohort.status == CohortStatus(status))
    cohorts = query.order_by(Cohort.created_at.asc()).all()
    if not cohorts:
        print("No cohorts found")
        return 0
    for cohort in cohorts:
        print(f"{cohort.join_code}\t{cohort.status.value}\t{as_utc(cohort.trial_ends_at).isoformat()}\t{cohort.name}")
    return 0


def show_cohort(db, join_code: str) -> int:
    cohort = find_cohort(db, join_code)
    if not cohort:
        print("Cohort not found")
        return 1
    print_cohort(db, cohort)
    return 0


def create(db, name: str, owner_email: str) -> int:
    owner = db.query(User).filter(User.email == owner_email.strip().lower()).first()
    if not owner:
        print("Owner not found")
        return 1
    cohort = create_cohort(db, owner, name.strip())
    print(f"Cohort created: {cohort.id}")
    print_cohort(db, cohort)
    return 0


def set_status(db, join_code: str, status: str) -> int:
    cohort = find_cohort(db, join_code)
    if not cohort:
        print("Cohort not found")
        return 1
    cohort.status = CohortStatus(status)
    if cohort.status == CohortStatus.active:
        cohort.activated_at = cohort.activated_at or utcnow()
    else:
        # activation is otherwise permanent
        cohort.activated_at = None
    db.commit()
    print("Status updated")
    print_cohort(db, cohort)
    return 0


def extend_trial(db, join_code: str, days: int) -> int:
    cohort = find_cohort(db, join_code)
    if not cohort:
        print("Cohort not found")
        return 1

    now = utcnow()
    base = as_utc(cohort.trial_ends_at)
    if base < now:
        base = now
    cohort.trial_ends_at = base + timedelta(days=days)
    if cohort.status == CohortStatus.locked:
        cohort.status = CohortStatus.trial
    db.commit()
    print("Trial extended")
    print_cohort(db, cohort)
    return 0


def list_members(db, join_code: str) -> int:
    cohort = find_cohort(db, join_code)
    if not cohort:
        print("Cohort not found")
        return 1
    members = (
        db.query(CohortMember)
        .filter(CohortMember.cohort_id == cohort.id)
        .order_by(CohortMember.joined_at.asc())
        .all()
    )
    if not members:
        print("No members found")
        return 0
    for member in members:
        subscription = member.user.subscription
        print(
            f"{member.user.email}\t{member.role.value}\t{subscription.status if subscription else '-'}"
            f"\t{as_utc(member.joined_at).isoformat()}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="IBDaily cohort admin tool")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list-cohorts", help="List cohorts")
    list_cmd.add_argument("--status", choices=[status.value for status in CohortStatus])

    show_cmd = sub.add_parser("show-cohort", help="Show cohort details")
    show_cmd.add_argument("--join-code", required=True)

    create_cmd = sub.add_parser("create-cohort", help="Create a cohort owned by an existing user")
    create_cmd.add_argument("--name", required=True)
    create_cmd.add_argument("--owner-email", required=True)

    status_cmd = sub.add_parser("set-status", help="Force a cohort status")
    status_cmd.add_argument("--join-code", required=True)
    status_cmd.add_argument("--status", required=True, choices=[status.value for status in CohortStatus])

    extend_cmd = sub.add_parser("extend-trial", help="Add days to a cohort trial")
    extend_cmd.add_argument("--join-code", required=True)
    extend_cmd.add_argument("--days", type=int, required=True)

    members_cmd = sub.add_parser("list-members", help="List cohort members")
    members_cmd.add_argument("--join-code", required=True)

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.command == "list-cohorts":
            return list_cohorts(db, args.status)
        if args.command == "show-cohort":
            return show_cohort(db, args.join_code)
        if args.command == "create-cohort":
            return create(db, args.name, args.owner_email)
        if args.command == "set-status":
            return set_status(db, args.join_code, args.status)
        if args.command == "extend-trial":
            return extend_trial(db, args.join_code, args.days)
        if args.command == "list-members":
            return list_members(db, args.join_code)
        print("Unknown command")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
