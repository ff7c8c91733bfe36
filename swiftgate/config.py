"""
Configuration settings for the SwiftGate backend.
Values come from the environment (and a project .env file when present).
"""

import os
import secrets
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# ======================
# Defaults
# ======================

DEFAULT_MONGO_URI = "mongodb://localhost:27017/"
DEFAULT_DB_NAME = "mern_registration"
DEFAULT_TOKEN_TTL_MINUTES = 60
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_PORT = 3000


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Runtime settings for the API server and the seeding script."""
    mongo_uri: str = DEFAULT_MONGO_URI
    db_name: str = DEFAULT_DB_NAME
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = DEFAULT_TOKEN_TTL_MINUTES
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    ssl_keyfile: Optional[str] = None
    ssl_certfile: Optional[str] = None
    log_level: str = "INFO"
    generated_secret: bool = False

    def __post_init__(self):
        # Tokens signed with a generated secret do not survive a restart.
        if not self.jwt_secret:
            self.jwt_secret = secrets.token_hex(32)
            self.generated_secret = True


def get_settings() -> Settings:
    """Build settings from environment variables.

    Returns:
        Settings: a fresh settings object reflecting the current environment
    """
    return Settings(
        mongo_uri=os.getenv("MONGO_URI", DEFAULT_MONGO_URI),
        db_name=os.getenv("MONGO_DB_NAME", DEFAULT_DB_NAME),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        token_ttl_minutes=_int_env("JWT_EXPIRES_MINUTES", DEFAULT_TOKEN_TTL_MINUTES),
        bcrypt_rounds=_int_env("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_env("PORT", DEFAULT_PORT),
        ssl_keyfile=os.getenv("SSL_KEYFILE") or None,
        ssl_certfile=os.getenv("SSL_CERTFILE") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
