# FileMaker Data MCP Server
# File: config.py
# Version: v2

"""Configuration loading for the FileMaker Data MCP Server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "vLatest"
DEFAULT_SESSION_TIMEOUT = 840  # below FileMaker Server's own 900s idle timeout
DEFAULT_REQUEST_TIMEOUT = 30
REMOTE_SESSION_TIMEOUT = 900

ENV_VARS = {
    "server": "FM_SERVER",
    "database": "FM_DATABASE",
    "username": "FM_USERNAME",
    "password": "FM_PASSWORD",
    "api_version": "FM_API_VERSION",
    "ssl_verify": "FM_SSL_VERIFY",
    "session_timeout": "FM_SESSION_TIMEOUT",
    "request_timeout": "FM_REQUEST_TIMEOUT",
    "log_level": "FM_LOG_LEVEL",
}


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None or not str(val).strip():
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


def normalize_server_url(url: str | None) -> str | None:
    """Prepend https:// to bare hosts and strip trailing slashes.

    An explicit http:// scheme is kept so validation can reject it.
    """
    if not url or not url.strip():
        return None

    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = f"https://{normalized}"

    return normalized.rstrip("/")


class ConfigError(ValueError):
    """Raised when the effective configuration cannot be used to log in."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors) or "Invalid configuration")
        self.errors = list(errors)


@dataclass
class ConfigValidation:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class FileMakerConfig:
    """Connection settings for one FileMaker database.

    The password is excluded from ``repr`` so configs can be logged or shown
    in tracebacks without leaking it.
    """

    server: str | None
    database: str | None
    username: str | None
    password: str | None = field(default=None, repr=False)
    api_version: str = DEFAULT_API_VERSION
    ssl_verify: bool = True
    session_timeout: int = DEFAULT_SESSION_TIMEOUT
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, **overrides: Any) -> "FileMakerConfig":
        """Create configuration from environment variables.

        Keyword overrides (e.g. the arguments of the login tool) take
        precedence over the environment whenever they are not ``None``.
        """
        config = cls(
            server=normalize_server_url(os.getenv(ENV_VARS["server"])),
            database=os.getenv(ENV_VARS["database"]) or None,
            username=os.getenv(ENV_VARS["username"]) or None,
            password=os.getenv(ENV_VARS["password"]) or None,
            api_version=os.getenv(ENV_VARS["api_version"]) or DEFAULT_API_VERSION,
            ssl_verify=_parse_bool_env(ENV_VARS["ssl_verify"], default=True),
            session_timeout=_parse_int_env(
                ENV_VARS["session_timeout"], default=DEFAULT_SESSION_TIMEOUT, min_value=1
            ),
            request_timeout=_parse_int_env(
                ENV_VARS["request_timeout"],
                default=DEFAULT_REQUEST_TIMEOUT,
                min_value=1,
                max_value=600,
            ),
            log_level=(
                os.getenv(ENV_VARS["log_level"]) or os.getenv("LOG_LEVEL") or "WARNING"
            ),
        )

        cleaned = {k: v for k, v in overrides.items() if v is not None}
        if "server" in cleaned:
            cleaned["server"] = normalize_server_url(cleaned["server"])
        if cleaned:
            config = replace(config, **cleaned)

        return config

    def validate(self) -> ConfigValidation:
        result = ConfigValidation()

        if not self.server:
            result.errors.append(f"{ENV_VARS['server']} is required")
        elif self.server.startswith("http://"):
            result.errors.append(
                f"{ENV_VARS['server']} must use HTTPS (plain HTTP is not allowed)"
            )

        if not self.database:
            result.errors.append(f"{ENV_VARS['database']} is required")
        if not self.username:
            result.errors.append(f"{ENV_VARS['username']} is required")
        if not self.password:
            result.errors.append(f"{ENV_VARS['password']} is required")

        if not self.ssl_verify:
            result.warnings.append(
                "TLS certificate verification is disabled. "
                "This is insecure and should only be used in development."
            )

        if self.session_timeout < 60:
            result.warnings.append(
                f"{ENV_VARS['session_timeout']} is very short "
                f"({self.session_timeout}s). Consider using at least 60 seconds."
            )
        if self.session_timeout > REMOTE_SESSION_TIMEOUT:
            result.warnings.append(
                f"{ENV_VARS['session_timeout']} ({self.session_timeout}s) exceeds "
                f"FileMaker's default timeout ({REMOTE_SESSION_TIMEOUT}s). "
                "Session may expire unexpectedly."
            )

        return result

    def redacted(self) -> Dict[str, Any]:
        """Log-safe snapshot of this configuration."""
        return {
            "server": self.server,
            "database": self.database,
            "username": self.username,
            "password": "***MASKED***" if self.password else None,
            "api_version": self.api_version,
            "ssl_verify": self.ssl_verify,
            "session_timeout": self.session_timeout,
            "request_timeout": self.request_timeout,
        }


def load_config(**overrides: Any) -> FileMakerConfig:
    """Build, validate and return a usable configuration.

    Warnings are logged; errors raise :class:`ConfigError`.
    """
    config = FileMakerConfig.from_env(**overrides)
    validation = config.validate()

    for warning in validation.warnings:
        logger.warning("%s", warning)

    if not validation.valid:
        for error in validation.errors:
            logger.error("Configuration error: %s", error)
        raise ConfigError(validation.errors)

    return config
