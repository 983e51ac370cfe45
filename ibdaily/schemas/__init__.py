from ibdaily.schemas.auth import SessionRequest, TokenResponse
from ibdaily.schemas.billing import BillingStatusResponse, CheckoutResponse, SubscriptionSummary, WebhookResponse
from ibdaily.schemas.cohort import (
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
from ibdaily.schemas.notifications import (
    NotificationPrefsResponse,
    NotificationPrefsUpdate,
    ReminderResult,
    ReminderRunResponse,
)
from ibdaily.schemas.progress import (
    AtRiskResponse,
    CalendarDayOut,
    CohortRef,
    DeadlineResponse,
    LeaderboardEntryOut,
    LeaderboardResponse,
    MeResponse,
)
from ibdaily.schemas.submission import (
    SubmissionOut,
    SubmissionRequest,
    SubmissionSavedResponse,
    TodaySubmissionResponse,
)

__all__ = [
    "AtRiskResponse",
    "BillingStatusResponse",
    "CalendarDayOut",
    "CheckoutResponse",
    "CohortCreateRequest",
    "CohortHealthResponse",
    "CohortJoinRequest",
    "CohortListResponse",
    "CohortRef",
    "CohortResponse",
    "CohortStatusResponse",
    "DailyStatsOut",
    "DeadlineResponse",
    "LeaderboardEntryOut",
    "LeaderboardResponse",
    "MeResponse",
    "MemberHealthOut",
    "NotificationPrefsResponse",
    "NotificationPrefsUpdate",
    "ReminderResult",
    "ReminderRunResponse",
    "RetentionOut",
    "SessionRequest",
    "SubmissionOut",
    "SubmissionRequest",
    "SubmissionSavedResponse",
    "SubscriptionSummary",
    "TodaySubmissionResponse",
    "TokenResponse",
    "WebhookResponse",
]
