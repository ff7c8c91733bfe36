"""
Credential store and token service.

Passwords are hashed with bcrypt; identity tokens are HS256 JWTs that expire
after a fixed lifetime.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from swiftgate.config import Settings
from swiftgate.errors import InvalidToken

# At least one digit, lowercase, uppercase and non-word symbol; 8+ characters.
# Classes are ASCII only: \d is 0-9 and any non-ASCII character counts as a symbol.
PASSWORD_PATTERN = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z])(?=.*\W).{8,}$", re.ASCII)
ACCOUNT_NUMBER_PATTERN = re.compile(r"^\d+$", re.ASCII)

BCRYPT_MAX_BYTES = 72

ROLE_CUSTOMER = "customer"
ROLE_EMPLOYEE = "employee"


def matches(pattern: re.Pattern, value: Any) -> bool:
    """Full-string regex check that treats non-strings as a mismatch."""
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def is_valid_password(password: Any) -> bool:
    return matches(PASSWORD_PATTERN, password)


def _password_bytes(password: str) -> bytes:
    # bcrypt only consumes the first 72 bytes.
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored bcrypt hash.

    A malformed hash is a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))
    except (ValueError, TypeError, AttributeError):
        return False


def issue_token(settings: Settings, claims: Dict[str, Any],
                ttl: Optional[timedelta] = None) -> str:
    """Sign ``claims`` into a token expiring after ``ttl``.

    Args:
        settings: supplies the signing secret, algorithm and default lifetime
        claims: must include ``id`` and ``accountNumber``; ``role`` is advisable
        ttl: overrides the configured lifetime

    Returns:
        The encoded JWT.
    """
    if ttl is None:
        ttl = timedelta(minutes=settings.token_ttl_minutes)
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + ttl
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def validate_token(settings: Settings, token: Optional[str]) -> Dict[str, Any]:
    """Decode and check a token, raising InvalidToken on any problem."""
    if not token:
        raise InvalidToken("Access denied, token is missing!")
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.InvalidTokenError:
        raise InvalidToken("Invalid token")

    if not claims.get("id") or not claims.get("accountNumber"):
        raise InvalidToken("Invalid token")
    return claims
