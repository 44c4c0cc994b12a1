"""JWT token creation and decoding.

Token claims:
  - sub:    client ID
  - email:  client email at issue time
  - type:   "access" | "refresh"
  - jti:    random token ID (two tokens minted in the same second differ)
  - exp:    expiry timestamp

Access and refresh tokens are signed with different secrets, so a token
can only ever verify as the kind it was minted as.
"""

import uuid
from datetime import datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from onboard.config import settings
from onboard.database import utcnow
from onboard.middleware.exceptions import InvalidTokenError, TokenExpiredError

ALGORITHM = settings.jwt_algorithm

ACCESS = "access"
REFRESH = "refresh"


def _secret_for(token_type: str) -> str:
    if token_type == REFRESH:
        return settings.refresh_secret_key
    return settings.secret_key


def _encode(client_id: str, email: str, token_type: str, expire: datetime) -> str:
    payload = {
        "sub": client_id,
        "email": email,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "exp": expire,
    }
    return jwt.encode(payload, _secret_for(token_type), algorithm=ALGORITHM)


def refresh_token_expiry() -> datetime:
    """Expiry stored alongside a persisted refresh token."""
    return utcnow() + timedelta(days=settings.refresh_token_expire_days)


def create_access_token(
    client_id: str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return _encode(client_id, email, ACCESS, expire)


def create_refresh_token(
    client_id: str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = utcnow() + (
        expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )
    return _encode(client_id, email, REFRESH, expire)


def decode_token(token: str, expected_type: str) -> dict:
    """Verify signature, expiry and token type.

    Raises TokenExpiredError or InvalidTokenError.
    """
    try:
        payload = jwt.decode(token, _secret_for(expected_type), algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()

    if payload.get("type") != expected_type:
        raise InvalidTokenError("Invalid token type")
    if not payload.get("sub"):
        raise InvalidTokenError()
    return payload
