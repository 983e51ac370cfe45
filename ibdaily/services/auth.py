from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from ibdaily.config import get_settings
from ibdaily.utils.time import utcnow

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class TokenData:
    user_id: UUID
    issued_at: datetime
    expires_at: datetime


def _signing_params(secret: str | None, algorithm: str | None) -> tuple[str, str]:
    if secret is not None and algorithm is not None:
        return secret, algorithm
    settings = get_settings()
    return secret or settings.jwt_secret, algorithm or settings.jwt_algorithm


def create_access_token(
    user_id: UUID,
    issued_at: datetime | None = None,
    ttl_days: int | None = None,
    secret: str | None = None,
    algorithm: str | None = None,
) -> tuple[str, TokenData]:
    # JWT timestamps have whole-second precision
    issued_at = (issued_at or utcnow()).replace(microsecond=0)
    if ttl_days is None:
        ttl_days = get_settings().token_ttl_days
    data = TokenData(user_id=user_id, issued_at=issued_at, expires_at=issued_at + timedelta(days=ttl_days))

    key, alg = _signing_params(secret, algorithm)
    claims = {
        "sub": str(user_id),
        "typ": ACCESS_TOKEN_TYPE,
        "iat": int(data.issued_at.timestamp()),
        "exp": int(data.expires_at.timestamp()),
    }
    return jwt.encode(claims, key, algorithm=alg), data


def decode_access_token(
    token: str,
    secret: str | None = None,
    algorithm: str | None = None,
) -> TokenData:
    key, alg = _signing_params(secret, algorithm)
    try:
        claims = jwt.decode(token, key, algorithms=[alg], options={"require": ["sub", "iat", "exp"]})
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid("Token invalid") from exc

    if claims.get("typ") != ACCESS_TOKEN_TYPE:
        raise TokenInvalid("Not an access token")
    try:
        user_id = UUID(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise TokenInvalid("Token subject malformed") from exc

    return TokenData(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )
