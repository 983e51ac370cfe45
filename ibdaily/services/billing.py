"""Stripe billing: checkout, customers and webhook processing.

Subscription rows are only ever written from verified webhook events; the
checkout endpoint merely starts a Checkout Session for the configured price.
"""
import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import stripe
from sqlalchemy.orm import Session

from ibdaily.config import Settings, get_settings
from ibdaily.models import AuditLog, Subscription, User
from ibdaily.services.cohorts import refresh_user_cohorts
from ibdaily.services.subscription import SubscriptionStatus
from ibdaily.utils.time import utcnow

logger = logging.getLogger(__name__)

FALLBACK_PERIOD = timedelta(days=30)


class BillingError(Exception):
    pass


class BillingNotConfigured(BillingError):
    pass


class WebhookSignatureError(BillingError):
    pass


def is_stripe_configured(settings: Settings | None = None) -> bool:
    settings = settings or get_settings()
    return bool(settings.stripe_secret_key and settings.stripe_price_id)


def _require_secret_key(settings: Settings) -> str:
    if not settings.stripe_secret_key:
        raise BillingNotConfigured("STRIPE_SECRET_KEY is not configured")
    return settings.stripe_secret_key


def get_or_create_customer(db: Session, user: User, settings: Settings | None = None) -> str:
    if user.stripe_customer_id:
        return user.stripe_customer_id

    settings = settings or get_settings()
    customer = stripe.Customer.create(
        api_key=_require_secret_key(settings),
        email=user.email,
        metadata={"user_id": str(user.id)},
    )
    user.stripe_customer_id = customer.id
    db.commit()
    return customer.id


def create_checkout_session(
    db: Session,
    user: User,
    success_url: str,
    cancel_url: str,
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or get_settings()
    if not is_stripe_configured(settings):
        raise BillingNotConfigured("Payment system is not configured")

    customer_id = get_or_create_customer(db, user, settings)
    session = stripe.checkout.Session.create(
        api_key=_require_secret_key(settings),
        customer=customer_id,
        mode="subscription",
        payment_method_types=["card"],
        line_items=[{"price": settings.stripe_price_id, "quantity": 1}],
        success_url=success_url,
        cancel_url=cancel_url,
        metadata={"user_id": str(user.id)},
        subscription_data={"metadata": {"user_id": str(user.id)}},
    )
    return {"session_id": session.id, "url": session.url}


def verify_webhook(payload: bytes, signature: str, secret: str) -> dict[str, Any]:
    """Check the Stripe-Signature header and return the decoded event."""
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(body, signature, secret, stripe.Webhook.DEFAULT_TOLERANCE)
        return json.loads(body)
    except (stripe.SignatureVerificationError, UnicodeDecodeError, ValueError) as exc:
        raise WebhookSignatureError("Invalid signature") from exc


def _period_end(subscription: dict[str, Any], now: datetime) -> datetime:
    timestamp = subscription.get("current_period_end")
    if not timestamp:
        # Newer API versions carry the period on the subscription items.
        items = (subscription.get("items") or {}).get("data") or []
        timestamp = items[0].get("current_period_end") if items else None
    if not timestamp:
        return now + FALLBACK_PERIOD
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


def _customer_id(subscription: dict[str, Any]) -> str:
    customer = subscription.get("customer")
    if isinstance(customer, dict):
        return customer.get("id", "")
    return customer or ""


def handle_subscription_change(db: Session, subscription: dict[str, Any], now: datetime | None = None) -> Subscription | None:
    now = now or utcnow()
    user_id = (subscription.get("metadata") or {}).get("user_id")
    if not user_id:
        logger.error("No user_id in metadata of subscription %s", subscription.get("id"))
        return None
    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        logger.error("Malformed user_id %r on subscription %s", user_id, subscription.get("id"))
        return None

    status = subscription.get("status") or ""
    period_end = _period_end(subscription, now)
    record = (
        db.query(Subscription)
        .filter(Subscription.stripe_subscription_id == subscription["id"])
        .first()
    )
    if record is None:
        record = db.query(Subscription).filter(Subscription.user_id == user_uuid).first()
    if record is None:
        record = Subscription(user_id=user_uuid, stripe_subscription_id=subscription["id"])
        db.add(record)

    record.stripe_subscription_id = subscription["id"]
    record.stripe_customer_id = _customer_id(subscription) or record.stripe_customer_id or ""
    record.status = status
    record.current_period_end = period_end
    db.add(
        AuditLog(
            user_id=user_uuid,
            action="subscription_change",
            meta={"subscription_id": subscription["id"], "status": status},
        )
    )
    db.commit()
    logger.info("Subscription %s updated: %s", subscription["id"], status)

    refresh_user_cohorts(db, user_uuid, now)
    return record


def handle_subscription_deleted(db: Session, subscription: dict[str, Any], now: datetime | None = None) -> Subscription | None:
    record = (
        db.query(Subscription)
        .filter(Subscription.stripe_subscription_id == subscription["id"])
        .first()
    )
    if record is None:
        logger.warning("Deleted subscription %s is unknown", subscription["id"])
        return None

    record.status = SubscriptionStatus.canceled.value
    db.add(
        AuditLog(
            user_id=record.user_id,
            action="subscription_change",
            meta={"subscription_id": subscription["id"], "status": record.status},
        )
    )
    db.commit()
    logger.info("Subscription %s deleted/canceled", subscription["id"])

    refresh_user_cohorts(db, record.user_id, now)
    return record


def handle_webhook_event(db: Session, event: dict[str, Any], now: datetime | None = None) -> str:
    """Apply a verified event. Returns the action taken, for logging and tests."""
    event_type = event.get("type", "")
    obj = (event.get("data") or {}).get("object") or {}

    if event_type in ("customer.subscription.created", "customer.subscription.updated"):
        return "subscription_updated" if handle_subscription_change(db, obj, now) else "ignored"
    if event_type == "customer.subscription.deleted":
        return "subscription_canceled" if handle_subscription_deleted(db, obj, now) else "ignored"
    if event_type == "checkout.session.completed":
        user_id = (obj.get("metadata") or {}).get("user_id")
        if not user_id:
            logger.error("No user_id in checkout session metadata")
            return "ignored"
        logger.info("Checkout completed for user %s", user_id)
        return "checkout_completed"
    if event_type in ("invoice.payment_succeeded", "invoice.payment_failed"):
        logger.info("%s: %s", event_type, obj.get("id"))
        return "logged"

    logger.info("Unhandled event type: %s", event_type)
    return "ignored"
