"""
Environment-based configuration for the Press Kit Builder service.

This module exposes a small, typed configuration surface for the API, the
Alembic environment and the test suite. All values are sourced from
environment variables with sensible, non-secret defaults.

No secrets are hard-coded here; `JWT_SECRET` must be provided via the
environment (or a local `.env` file loaded with python-dotenv) outside
local development.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional

Environment = Literal["local", "dev", "staging", "prod"]

DEFAULT_JWT_SECRET = "change-me"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    environment: Environment
    log_level: str

    # Optional file path for structured JSON logs; when set, logs are written
    # to file (and stdout if log_stdout).
    log_file: Optional[str]
    log_stdout: bool

    database_url: Optional[str]

    # Bearer tokens and password hashing
    jwt_secret: str
    jwt_algorithm: str
    jwt_expires_days: int
    reset_token_expires_minutes: int
    bcrypt_rounds: int

    # When True, a failing analytics insert on the public view is logged and
    # rolled back instead of failing the read.
    analytics_fail_open: bool

    cors_allow_origins: tuple[str, ...]

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Construct configuration from environment variables.

        All fields have defaults suitable for local development. Production
        deployments are expected to override these via env vars.
        """

        environment = os.getenv("APP_ENV", "local")

        if environment not in {"local", "dev", "staging", "prod"}:
            raise ValueError(f"Unsupported APP_ENV value: {environment!r}")

        def _bool_env(name: str, default: bool) -> bool:
            raw = (os.getenv(name) or str(default)).strip().lower()
            return raw in ("true", "1", "yes")

        def _int_env(name: str, default: int) -> int:
            raw = (os.getenv(name) or "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                return default

        jwt_secret = os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET
        if environment == "prod" and jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set to a strong value in production")

        # bcrypt refuses costs outside 4..31; anything above 15 is too slow for a login path.
        bcrypt_rounds = max(4, min(15, _int_env("BCRYPT_ROUNDS", 10)))

        origins_raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
        cors_allow_origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())

        return cls(
            environment=environment,  # type: ignore[arg-type]
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_stdout=_bool_env("LOG_STDOUT", True),
            database_url=os.getenv("DATABASE_URL") or None,
            jwt_secret=jwt_secret,
            jwt_algorithm="HS256",
            jwt_expires_days=_int_env("JWT_EXPIRES_DAYS", 7),
            reset_token_expires_minutes=_int_env("RESET_TOKEN_EXPIRES_MINUTES", 60),
            bcrypt_rounds=bcrypt_rounds,
            analytics_fail_open=_bool_env("ANALYTICS_FAIL_OPEN", False),
            cors_allow_origins=cors_allow_origins or ("*",),
        )


def get_config() -> AppConfig:
    """
    Helper to obtain the current configuration.

    Configuration is re-read from the environment on every call so that
    tests can adjust it with monkeypatch.setenv.
    """

    return AppConfig.from_env()
