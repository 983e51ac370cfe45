from datetime import datetime

from pydantic import BaseModel


class SubscriptionSummary(BaseModel):
    status: str
    current_period_end: datetime
    is_active: bool


class BillingStatusResponse(BaseModel):
    stripe_configured: bool
    subscription: SubscriptionSummary | None
    has_subscription: bool
    is_active: bool


class CheckoutResponse(BaseModel):
    session_id: str
    url: str | None


class WebhookResponse(BaseModel):
    received: bool = True
    action: str
