from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from ibdaily.services.auth import TokenExpired, TokenInvalid, create_access_token, decode_access_token


def test_create_token_claims():
    issued_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    user_id = uuid4()
    token, data = create_access_token(
        user_id,
        issued_at=issued_at,
        ttl_days=30,
        secret="test-secret",
        algorithm="HS256",
    )

    # long expired by now, so read the claims without the exp check
    payload = jwt.decode(token, "test-secret", algorithms=["HS256"], options={"verify_exp": False})
    assert payload["sub"] == str(user_id)
    assert payload["typ"] == "access"
    assert data.expires_at == issued_at + timedelta(days=30)


def test_decode_fresh_token():
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)
    user_id = uuid4()
    token, _ = create_access_token(user_id, issued_at=issued_at, ttl_days=7, secret="test-secret", algorithm="HS256")

    decoded = decode_access_token(token, secret="test-secret", algorithm="HS256")

    assert decoded.user_id == user_id
    assert decoded.issued_at == issued_at
    assert decoded.expires_at == issued_at + timedelta(days=7)


def test_decode_expired_token():
    issued_at = datetime.now(timezone.utc) - timedelta(days=8)
    token, _ = create_access_token(
        uuid4(),
        issued_at=issued_at,
        ttl_days=7,
        secret="test-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenExpired):
        decode_access_token(token, secret="test-secret", algorithm="HS256")


def test_decode_invalid_token():
    token, _ = create_access_token(
        uuid4(),
        issued_at=datetime.now(timezone.utc),
        ttl_days=7,
        secret="test-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalid):
        decode_access_token(token, secret="wrong-secret", algorithm="HS256")


def encode_claims(**overrides) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(uuid4()),
        "typ": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=1)).timestamp()),
    }
    claims.update(overrides)
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def test_decode_token_with_malformed_subject():
    token = encode_claims(sub="not-a-uuid")

    with pytest.raises(TokenInvalid):
        decode_access_token(token, secret="test-secret", algorithm="HS256")


def test_decode_rejects_other_token_types():
    with pytest.raises(TokenInvalid):
        decode_access_token(encode_claims(typ="refresh"), secret="test-secret", algorithm="HS256")


def test_decode_requires_subject():
    token = encode_claims()
    claims = jwt.decode(token, "test-secret", algorithms=["HS256"])
    del claims["sub"]

    with pytest.raises(TokenInvalid):
        decode_access_token(jwt.encode(claims, "test-secret", algorithm="HS256"), secret="test-secret", algorithm="HS256")


def test_issued_at_truncated_to_seconds():
    issued_at = datetime(2026, 1, 1, 8, 30, 15, 999999, tzinfo=timezone.utc)

    _, data = create_access_token(uuid4(), issued_at=issued_at, ttl_days=1, secret="s", algorithm="HS256")

    assert data.issued_at == datetime(2026, 1, 1, 8, 30, 15, tzinfo=timezone.utc)
