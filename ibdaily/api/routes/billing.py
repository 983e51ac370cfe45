from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_current_user, get_db
from ibdaily.config import get_settings
from ibdaily.models import User
from ibdaily.schemas import BillingStatusResponse, CheckoutResponse, SubscriptionSummary
from ibdaily.services.billing import BillingNotConfigured, create_checkout_session, is_stripe_configured
from ibdaily.services.subscription import SubscriptionSnapshot, is_subscription_active
from ibdaily.utils.time import utcnow

router = APIRouter(prefix="/billing", tags=["billing"])
settings = get_settings()


@router.get("", response_model=BillingStatusResponse)
def billing_status(user: User = Depends(get_current_user)) -> BillingStatusResponse:
    record = user.subscription
    is_active = is_subscription_active(SubscriptionSnapshot.from_record(record), utcnow())
    return BillingStatusResponse(
        stripe_configured=is_stripe_configured(settings),
        subscription=(
            SubscriptionSummary(status=record.status, current_period_end=record.current_period_end, is_active=is_active)
            if record
            else None
        ),
        has_subscription=record is not None,
        is_active=is_active,
    )


@router.post("/checkout", response_model=CheckoutResponse)
def checkout(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> CheckoutResponse:
    if not is_stripe_configured(settings):
        raise HTTPException(status_code=503, detail="Payment system is not configured")
    if is_subscription_active(SubscriptionSnapshot.from_record(user.subscription)):
        raise HTTPException(status_code=400, detail="You already have an active subscription")

    origin = (request.headers.get("origin") or settings.app_base_url).rstrip("/")
    try:
        session = create_checkout_session(
            db,
            user,
            success_url=f"{origin}/billing?success=true",
            cancel_url=f"{origin}/billing?canceled=true",
            settings=settings,
        )
    except BillingNotConfigured as exc:
        raise HTTPException(status_code=503, detail="Payment system is not configured") from exc
    return CheckoutResponse(**session)
