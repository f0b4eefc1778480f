from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Literal
import jwt
from passlib.context import CryptContext
from memevsmeme.config import settings

TokenType = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidToken(Exception):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def _make_token(user_id: int | str, ttl_min: int, token_type: TokenType) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now.timestamp(),  # float keeps back-to-back tokens distinct
        "exp": int((now + timedelta(minutes=ttl_min)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

def make_access_token(user_id: int | str) -> str:
    return _make_token(user_id, settings.access_ttl_min, "access")

def make_refresh_token(user_id: int | str) -> str:
    return _make_token(user_id, settings.refresh_ttl_min, "refresh")

def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])

def user_id_from_token(token: str, expected: TokenType) -> int:
    """Check signature, expiry and token type; return the integer user id from `sub`."""
    try:
        data = decode_token(token)
    except jwt.PyJWTError as e:
        raise InvalidToken("Invalid token") from e
    if data.get("type") != expected:
        raise InvalidToken("Wrong token type")
    try:
        return int(data["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidToken("Invalid token")
