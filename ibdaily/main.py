import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ibdaily.api.routes import (
    auth_router,
    billing_router,
    cohorts_router,
    cron_router,
    deadline_router,
    notification_prefs_router,
    progress_router,
    submission_router,
    webhooks_router,
)
from ibdaily.config import get_settings

settings = get_settings()

logging.basicConfig(level=settings.log_level)

app = FastAPI(title=settings.app_name)


@app.middleware("http")
async def enforce_https(request: Request, call_next):
    if not settings.allow_insecure_http:
        proto = request.headers.get("x-forwarded-proto") or request.url.scheme
        if proto != "https":
            return JSONResponse(status_code=400, content={"detail": "HTTPS required"})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(deadline_router)
app.include_router(progress_router)
app.include_router(cohorts_router)
app.include_router(submission_router)
app.include_router(notification_prefs_router)
app.include_router(billing_router)
app.include_router(webhooks_router)
app.include_router(cron_router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
