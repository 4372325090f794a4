"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables so the service has no dependency on a
configuration framework.  Defaults are provided for every field except
the token signing secret: ``JWT_SECRET`` must be supplied, otherwise
``Settings.validate`` raises ``ConfigurationError`` and the application
refuses to start.
"""

import os
from dataclasses import dataclass, field
from typing import List

from .errors import ConfigurationError


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = "Posts API"
    api_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = ""
    access_log_level: str = ""
    jwt_secret: str = ""
    # Tokens are valid for 24 hours unless overridden.
    access_token_expire_minutes: int = 60 * 24
    password_hash_iterations: int = 100_000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment.

        Environment variables are read at call time, so tests may patch
        ``os.environ`` before calling this.
        """
        return cls(
            project_name=os.getenv("PROJECT_NAME", "Posts API"),
            api_version=os.getenv("API_VERSION", "1.0.0"),
            debug=_env_bool("DEBUG"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
            access_log_level=os.getenv("ACCESS_LOG_LEVEL", ""),
            jwt_secret=os.getenv("JWT_SECRET", ""),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))),
            password_hash_iterations=int(os.getenv("PASSWORD_HASH_ITERATIONS", "100000")),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
        )

    @property
    def access_token_expire_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    def validate(self) -> "Settings":
        """Check required values and return ``self``.

        Raises
        ------
        ConfigurationError
            If the signing secret is missing or a numeric setting is
            out of range.
        """
        if not self.jwt_secret:
            raise ConfigurationError("JWT_SECRET must be set", setting="JWT_SECRET")
        if self.access_token_expire_minutes <= 0:
            raise ConfigurationError(
                "ACCESS_TOKEN_EXPIRE_MINUTES must be positive",
                setting="ACCESS_TOKEN_EXPIRE_MINUTES",
            )
        if self.password_hash_iterations <= 0:
            raise ConfigurationError(
                "PASSWORD_HASH_ITERATIONS must be positive",
                setting="PASSWORD_HASH_ITERATIONS",
            )
        return self
