# FileMaker Data MCP Server
# File: session.py
# Version: v2

"""In-memory session state for one FileMaker database connection.

A :class:`SessionManager` is either *Absent* (no token) or *Active* (token plus
the configuration used to obtain it). It owns one :class:`FileMakerClient` per
active session; every authenticated operation goes through
:meth:`SessionManager.run_authenticated`, which supplies the client and token.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from .client import FileMakerClient
from .config import FileMakerConfig
from .errors import ErrorCode, ErrorDescriptor, FileMakerError, no_session_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[FileMakerConfig], FileMakerClient]


@dataclass
class SessionInfo:
    database: str
    server: str
    created_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database,
            "server": self.server,
            "created_at": self.created_at,
        }


@dataclass
class LogoutResult:
    success: bool
    message: str
    error: Optional[ErrorDescriptor] = None


@dataclass
class SessionValidation:
    valid: bool
    message: str
    session_age: Optional[int] = None


class SessionManager:
    """Holds at most one active FileMaker session."""

    def __init__(
        self,
        client_factory: ClientFactory = FileMakerClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client_factory = client_factory
        self._clock = clock

        self._client: Optional[FileMakerClient] = None
        self._config: Optional[FileMakerConfig] = None
        self._token: Optional[str] = None
        self._created_at: Optional[float] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def has_active_session(self) -> bool:
        return self._token is not None

    @property
    def config(self) -> Optional[FileMakerConfig]:
        return self._config

    @property
    def session_info(self) -> Optional[SessionInfo]:
        if self._token is None or self._config is None or self._created_at is None:
            return None
        return SessionInfo(
            database=self._config.database or "",
            server=self._config.server or "",
            created_at=self._created_at,
        )

    @property
    def session_age(self) -> Optional[int]:
        """Whole seconds since login, or None without a session."""
        if self._created_at is None:
            return None
        return int(math.floor(self._clock() - self._created_at))

    def is_expiring_soon(self, buffer_seconds: int = 60) -> bool:
        """Advisory check against the configured session timeout."""
        age = self.session_age
        if age is None or self._config is None:
            return False
        return age >= self._config.session_timeout - buffer_seconds

    def _clear(self) -> None:
        self._client = None
        self._config = None
        self._token = None
        self._created_at = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def login(self, config: FileMakerConfig) -> SessionInfo:
        """Open a new session, closing any existing one first.

        Raises FileMakerError when the server rejects the login; the manager is
        left without a session in that case.
        """
        if self.has_active_session:
            logger.info("Closing existing session before new login")
            try:
                await self.logout()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to close previous session: %s", type(exc).__name__)
            self._clear()

        client = self._client_factory(config)
        response = await client.login_request(config.username or "", config.password or "")

        token = None
        if isinstance(response.data, dict):
            token = response.data.get("token")
        if not token:
            raise FileMakerError(
                ErrorDescriptor(
                    code=ErrorCode.AUTH_INVALID_CREDENTIALS,
                    message="Login response did not include a session token",
                    retryable=False,
                )
            )

        self._client = client
        self._config = config
        self._token = str(token)
        self._created_at = self._clock()

        logger.info("Session established for database: %s", config.database)
        return SessionInfo(
            database=config.database or "",
            server=config.server or "",
            created_at=self._created_at,
        )

    async def logout(self) -> LogoutResult:
        """Close the session. Local state is cleared even when the remote call
        fails or raises; only FileMaker errors become a failed LogoutResult."""
        if self._token is None or self._client is None:
            return LogoutResult(
                success=False,
                message="No active session",
                error=no_session_error(),
            )

        client, token = self._client, self._token
        try:
            await client.logout_request(token)
        except FileMakerError as exc:
            if exc.code == ErrorCode.SESSION_EXPIRED:
                logger.info("Logout: session had already expired")
                return LogoutResult(success=True, message="Session already expired")

            logger.warning("Logout failed remotely: %s", exc.error.message)
            return LogoutResult(success=False, message=exc.error.message, error=exc.error)
        finally:
            self._clear()

        logger.info("Logged out successfully")
        return LogoutResult(success=True, message="Logged out successfully")

    async def validate_session(self) -> SessionValidation:
        """Probe the server with GET /layouts to check the token still works."""
        if self._token is None or self._client is None:
            return SessionValidation(valid=False, message="No active session")

        try:
            await self._client.get("/layouts", self._token)
        except FileMakerError as exc:
            if exc.code == ErrorCode.SESSION_EXPIRED:
                self._clear()
                return SessionValidation(valid=False, message="Session expired")
            return SessionValidation(valid=False, message=exc.error.message)

        return SessionValidation(
            valid=True,
            message="Session is valid",
            session_age=self.session_age,
        )

    async def run_authenticated(
        self,
        fn: Callable[[FileMakerClient, str], Awaitable[T]],
    ) -> T:
        """Call ``fn(client, token)`` with the active session.

        Raises 2002 without a session. A 2001 raised by ``fn`` clears the
        session before it propagates.
        """
        if self._token is None or self._client is None:
            raise FileMakerError(no_session_error())

        try:
            return await fn(self._client, self._token)
        except FileMakerError as exc:
            if exc.code == ErrorCode.SESSION_EXPIRED:
                logger.warning("Session expired; clearing local session state")
                self._clear()
            raise
