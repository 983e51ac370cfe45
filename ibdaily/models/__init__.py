from ibdaily.models.audit_log import AuditLog
from ibdaily.models.cohort import Cohort, CohortMember, CohortStatus, MemberRole
from ibdaily.models.notification_prefs import NotificationPrefs
from ibdaily.models.reminder_log import ReminderLog, ReminderType
from ibdaily.models.submission import QualityStatus, Submission
from ibdaily.models.subscription import Subscription
from ibdaily.models.user import User

__all__ = [
    "AuditLog",
    "Cohort",
    "CohortMember",
    "CohortStatus",
    "MemberRole",
    "NotificationPrefs",
    "QualityStatus",
    "ReminderLog",
    "ReminderType",
    "Submission",
    "Subscription",
    "User",
]
