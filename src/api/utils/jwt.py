from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import ApplicationConfig

MEMBER_TOKEN_TYPE = "member"


def generate_member_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Generate a member card token

    Args:
        user_id: Patron the card belongs to
        expires_delta: Token lifetime (defaults to MEMBER_TOKEN_TTL seconds)

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    expires_delta = expires_delta or timedelta(seconds=ApplicationConfig.MEMBER_TOKEN_TTL)
    payload = {
        "user_id": user_id,
        "typ": MEMBER_TOKEN_TYPE,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
        return payload
    except JWTError:
        return None


def verify_member_token(token: str) -> Optional[str]:
    """User id carried by a valid member token, None otherwise"""
    payload = verify_jwt(token)
    if not payload or payload.get("typ") != MEMBER_TOKEN_TYPE:
        return None
    return payload.get("user_id")
