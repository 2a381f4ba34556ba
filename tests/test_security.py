from datetime import datetime, timedelta, timezone

import jwt

from conftest import SECRET
from pizza_service.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

USER = {"id": 3, "name": "pizza diner", "email": "d@jwt.com", "roles": [{"role": "diner"}]}


def test_password_hash():
    hashed = get_password_hash("diner")
    assert hashed != "diner"
    assert verify_password("diner", hashed)
    assert not verify_password("franchisee", hashed)


def test_token_round_trip(settings):
    token = create_access_token(USER)
    claims = decode_access_token(token)

    assert claims.user_id == 3
    assert claims.email == "d@jwt.com"
    assert claims.roles == [{"role": "diner"}]
    assert claims.expires_at > datetime.now(timezone.utc)


def test_each_token_is_unique(settings):
    first = decode_access_token(create_access_token(USER))
    second = decode_access_token(create_access_token(USER))
    assert first.jti != second.jti


def test_rejected_tokens(settings):
    now = datetime.now(timezone.utc)
    payload = {**USER, "jti": "abc", "exp": now + timedelta(minutes=5)}

    assert decode_access_token("BOGUS") is None
    assert decode_access_token(jwt.encode(payload, "wrong secret", algorithm="HS256")) is None
    assert decode_access_token(jwt.encode({**payload, "exp": now - timedelta(seconds=1)}, SECRET)) is None

    no_jti = {key: value for key, value in payload.items() if key != "jti"}
    assert decode_access_token(jwt.encode(no_jti, SECRET, algorithm="HS256")) is None

    no_id = {key: value for key, value in payload.items() if key != "id"}
    assert decode_access_token(jwt.encode(no_id, SECRET, algorithm="HS256")) is None

    assert decode_access_token(jwt.encode(payload, SECRET, algorithm="HS256")).jti == "abc"
