from ibdaily.api.routes.auth import router as auth_router
from ibdaily.api.routes.billing import router as billing_router
from ibdaily.api.routes.cohorts import router as cohorts_router
from ibdaily.api.routes.cron import router as cron_router
from ibdaily.api.routes.deadline import router as deadline_router
from ibdaily.api.routes.notification_prefs import router as notification_prefs_router
from ibdaily.api.routes.progress import router as progress_router
from ibdaily.api.routes.submission import router as submission_router
from ibdaily.api.routes.webhooks import router as webhooks_router

__all__ = [
    "auth_router",
    "billing_router",
    "cohorts_router",
    "cron_router",
    "deadline_router",
    "notification_prefs_router",
    "progress_router",
    "submission_router",
    "webhooks_router",
]
