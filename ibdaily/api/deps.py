import hmac
import math
import uuid

from fastapi import Depends, Header, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ibdaily.config import get_settings
from ibdaily.db import SessionLocal
from ibdaily.models import CohortMember, User
from ibdaily.services.auth import TokenData, TokenExpired, TokenInvalid, decode_access_token
from ibdaily.services.cohorts import get_membership
from ibdaily.services.rate_limit import RateLimiter

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)
session_limiter = RateLimiter(settings.rate_limit_session_per_minute, 60)
submission_limiter = RateLimiter(settings.rate_limit_submission_per_minute, 60)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def enforce_rate_limit(limiter: RateLimiter, key: str) -> None:
    retry_after = limiter.hit(key)
    if retry_after is not None:
        raise HTTPException(
            status_code=429,
            detail="Too many requests",
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
        )


def rate_limit_session(request: Request) -> None:
    enforce_rate_limit(session_limiter, get_client_ip(request))


def require_cron(authorization: str | None = Header(default=None)) -> None:
    if not settings.cron_secret:
        if settings.is_development:
            return
        raise HTTPException(status_code=401, detail="Unauthorized")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not hmac.compare_digest(token.encode(), settings.cron_secret.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_token_data(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenData:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        return decode_access_token(credentials.credentials)
    except TokenExpired:
        raise HTTPException(status_code=401, detail="Token expired")
    except TokenInvalid:
        raise HTTPException(status_code=401, detail="Token invalid")


def get_current_user(
    token_data: TokenData = Depends(get_token_data),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == token_data.user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_membership(db: Session, user: User, cohort_id: uuid.UUID) -> CohortMember:
    membership = get_membership(db, user.id, cohort_id)
    if not membership:
        raise HTTPException(status_code=403, detail="Not a member of this cohort")
    return membership
