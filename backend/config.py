import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime configuration, built once at startup and passed to each component."""

    database_path: str = "todo.db"
    auth_enabled: bool = True
    jwt_secret: str = ""
    token_ttl_days: int = 7
    anthropic_api_key: str = ""
    completion_model: str = "claude-sonnet-4-5"
    completion_max_tokens: int = 512
    completion_timeout_s: float = 30.0
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Read settings from the process environment (and a .env file if present)."""
        load_dotenv(env_file)
        defaults = cls()
        origins = os.getenv("TODO_CORS_ORIGINS")
        return cls(
            database_path=os.getenv("TODO_DATABASE_PATH", defaults.database_path),
            auth_enabled=_env_bool("TODO_AUTH_ENABLED", default=defaults.auth_enabled),
            jwt_secret=os.getenv("TODO_JWT_SECRET", ""),
            token_ttl_days=_env_int("TODO_TOKEN_TTL_DAYS", default=defaults.token_ttl_days),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            completion_model=os.getenv("TODO_COMPLETION_MODEL", defaults.completion_model),
            completion_max_tokens=_env_int(
                "TODO_COMPLETION_MAX_TOKENS", default=defaults.completion_max_tokens
            ),
            completion_timeout_s=_env_float(
                "TODO_COMPLETION_TIMEOUT_S", default=defaults.completion_timeout_s
            ),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins is not None
                else defaults.cors_origins
            ),
            log_level=_env_log_level("TODO_LOG_LEVEL", default=defaults.log_level),
        )


def _env_bool(name: str, *, default: bool) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    value = raw_value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _env_log_level(name: str, *, default: str) -> str:
    """Read a logging level name; return default when unset/unknown."""
    value = os.getenv(name, default).strip().upper()
    if value not in logging.getLevelNamesMapping():
        return default
    return value


def _env_int(name: str, *, default: int) -> int:
    """Read integer env var; return default when unset/invalid."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _env_float(name: str, *, default: float) -> float:
    """Read float env var; return default when unset/invalid."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default
