import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ibdaily.api.deps import get_db
from ibdaily.config import get_settings
from ibdaily.schemas import WebhookResponse
from ibdaily.services.billing import WebhookSignatureError, handle_webhook_event, verify_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
settings = get_settings()


def process_event(db: Session, event: dict) -> str:
    try:
        return handle_webhook_event(db, event)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error processing webhook %s", event.get("id"))
        raise HTTPException(status_code=500, detail="Webhook processing failed") from exc


@router.post("/stripe", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> WebhookResponse:
    if not settings.stripe_webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Webhook not configured")
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    # signature check needs the raw body
    payload = await request.body()
    try:
        event = verify_webhook(payload, stripe_signature, settings.stripe_webhook_secret)
    except WebhookSignatureError as exc:
        logger.warning("Webhook signature verification failed: %s", exc.__cause__ or exc)
        raise HTTPException(status_code=400, detail="Invalid signature") from exc

    action = await run_in_threadpool(process_event, db, event)
    return WebhookResponse(action=action)
