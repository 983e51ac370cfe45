from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ibdaily.api.deps import get_client_ip, get_db, rate_limit_session
from ibdaily.models import AuditLog, User
from ibdaily.schemas import SessionRequest, TokenResponse
from ibdaily.services.auth import create_access_token
from ibdaily.utils.time import utcnow

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/session", response_model=TokenResponse, dependencies=[Depends(rate_limit_session)])
def create_session(payload: SessionRequest, request: Request, db: Session = Depends(get_db)) -> TokenResponse:
    email = payload.email.strip().lower()
    firebase_uid = payload.firebase_uid.strip()
    if not email or "@" not in email or not firebase_uid:
        raise HTTPException(status_code=400, detail="Email and identity are required")

    user = db.query(User).filter(func.lower(User.email) == email).first()
    if user is None:
        user = User(email=email, firebase_uid=firebase_uid, name=payload.name)
        db.add(user)
    elif not user.firebase_uid:
        user.firebase_uid = firebase_uid
    elif user.firebase_uid != firebase_uid:
        raise HTTPException(status_code=401, detail="Identity mismatch")
    db.flush()

    now = utcnow()
    token, token_data = create_access_token(user.id, issued_at=now)
    db.add(AuditLog(user_id=user.id, action="session", meta={"ip": get_client_ip(request)}))
    db.commit()

    return TokenResponse(
        access_token=token,
        user_id=user.id,
        issued_at=token_data.issued_at,
        expires_at=token_data.expires_at,
        server_time=now,
    )
