# FileMaker Data MCP Server
# File: client.py
# Version: v2
"""HTTP client for the FileMaker Data API.

Implements:

- request() / get() / post() / delete(): authenticated JSON calls
- login_request() / logout_request(): session creation and teardown
- list_layouts(), get_layout_metadata(), list_scripts()
- get_records(), get_record(), find_records()

Every failure is raised as :class:`~filemaker_data_mcp.errors.FileMakerError`
carrying a resolved ErrorDescriptor. Success responses are unwrapped from the
``{"response": ..., "messages": [...]}`` envelope.
"""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from httpx import RequestError, TimeoutException

from .config import FileMakerConfig
from .errors import (
    ErrorCode,
    ErrorDescriptor,
    FileMakerError,
    create_error,
    extract_fm_error_code,
)
from .models import LayoutMetadata, NamedEntry, RecordSet

logger = logging.getLogger(__name__)

DATA_API_BASE = "/fmi/data"

_TLS_WARNING_EMITTED = False


def _warn_tls_disabled_once() -> None:
    global _TLS_WARNING_EMITTED
    if _TLS_WARNING_EMITTED:
        return
    _TLS_WARNING_EMITTED = True
    logger.warning(
        "TLS certificate verification is disabled for FileMaker requests. "
        "Only use this against development servers."
    )


def _layout_path(layout: str) -> str:
    return f"/layouts/{quote(layout, safe='')}"


@dataclass
class ApiResponse:
    """Unwrapped success response."""

    status: int
    data: Any
    messages: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class FileMakerClient:
    """Wrapper around the FileMaker Data API for a single database.

    ``transport`` is handed to ``httpx.AsyncClient`` and exists so tests can
    plug in ``httpx.MockTransport``.
    """

    config: FileMakerConfig
    transport: Optional[httpx.AsyncBaseTransport] = None

    def __post_init__(self) -> None:
        if not self.config.ssl_verify:
            _warn_tls_disabled_once()

    # ------------------------------------------------------------------
    # Core request plumbing
    # ------------------------------------------------------------------

    def build_url(self, path: str) -> str:
        """Compose ``{server}/fmi/data/{version}/databases/{db}{path}``."""
        server = (self.config.server or "").rstrip("/")
        database = quote(self.config.database or "", safe="")
        normalized = path if path.startswith("/") else f"/{path}"
        return (
            f"{server}{DATA_API_BASE}/{self.config.api_version}"
            f"/databases/{database}{normalized}"
        )

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=float(self.config.request_timeout),
            verify=self.config.ssl_verify,
            transport=self.transport,
        )

    async def _send(
        self,
        method: str,
        path: str,
        headers: Dict[str, str],
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        label: Optional[str] = None,
    ) -> ApiResponse:
        url = self.build_url(path)
        label = label or f"{method} {path}"
        started = time.monotonic()

        logger.debug("Request: %s", label)

        async with self._http_client() as http_client:
            try:
                response = await http_client.request(
                    method,
                    url,
                    headers=headers,
                    json=body,
                    params=params or None,
                )
            except TimeoutException as exc:
                logger.error("Request timeout: %s (%s)", label, type(exc).__name__)
                raise FileMakerError(create_error(504, details=f"Timeout: {label}")) from exc
            except RequestError as exc:
                # httpx messages never include the Authorization header, but the
                # exception text is still kept out of the returned descriptor.
                logger.error("Network error: %s (%s)", label, type(exc).__name__)
                raise FileMakerError(
                    ErrorDescriptor(
                        code=ErrorCode.AUTH_SERVER_UNAVAILABLE,
                        message="Unable to reach the FileMaker server",
                        retryable=True,
                        details=f"{label}: {type(exc).__name__}",
                    )
                ) from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        data = self._decode(response)

        if not response.is_success:
            fm_code = extract_fm_error_code(data)
            logger.warning(
                "API error: HTTP %s on %s (fm_error_code=%s, %sms)",
                response.status_code,
                label,
                fm_code,
                elapsed_ms,
            )
            raise FileMakerError(create_error(response.status_code, fm_code, label))

        logger.debug("%s completed with HTTP %s in %sms", label, response.status_code, elapsed_ms)

        if isinstance(data, dict) and "response" in data:
            messages = data.get("messages")
            return ApiResponse(
                status=response.status_code,
                data=data.get("response"),
                messages=messages if isinstance(messages, list) else [],
            )

        return ApiResponse(status=response.status_code, data=data)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self._send(method, path, headers, body=body, params=params)

    async def get(
        self,
        path: str,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        return await self.request("GET", path, token, params=params)

    async def post(self, path: str, token: Optional[str] = None, body: Any = None) -> ApiResponse:
        return await self.request("POST", path, token, body=body)

    async def delete(self, path: str, token: Optional[str] = None) -> ApiResponse:
        return await self.request("DELETE", path, token)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def login_request(self, username: str, password: str) -> ApiResponse:
        """POST /sessions with HTTP Basic credentials."""
        raw_credentials = f"{username}:{password}"
        basic_token = base64.b64encode(raw_credentials.encode("utf-8")).decode("ascii")

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Basic {basic_token}",
        }

        logger.info("Login attempt for database: %s", self.config.database)
        return await self._send("POST", "/sessions", headers, body={}, label="POST /sessions (login)")

    async def logout_request(self, token: str) -> ApiResponse:
        """DELETE /sessions/{token}. The token stays out of error details and logs."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        return await self._send(
            "DELETE",
            f"/sessions/{quote(token, safe='')}",
            headers,
            label="DELETE /sessions (logout)",
        )

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def list_layouts(self, token: str) -> List[NamedEntry]:
        response = await self.get("/layouts", token)
        raw = response.data.get("layouts") if isinstance(response.data, dict) else None
        return [
            NamedEntry.from_api(item, "folderLayoutNames")
            for item in raw or []
            if isinstance(item, dict)
        ]

    async def get_layout_metadata(self, layout: str, token: str) -> LayoutMetadata:
        response = await self.get(_layout_path(layout), token)
        if not isinstance(response.data, dict):
            raise FileMakerError(
                create_error(500, details=f"Unexpected response format for layout '{layout}'")
            )
        try:
            return LayoutMetadata.from_api(layout, response.data)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Malformed metadata for layout %s (%s)", layout, type(exc).__name__)
            raise FileMakerError(
                create_error(500, details=f"Malformed metadata for layout '{layout}'")
            ) from exc

    async def list_scripts(self, token: str) -> List[NamedEntry]:
        response = await self.get("/scripts", token)
        raw = response.data.get("scripts") if isinstance(response.data, dict) else None
        return [
            NamedEntry.from_api(item, "folderScriptNames")
            for item in raw or []
            if isinstance(item, dict)
        ]

    # ------------------------------------------------------------------
    # Records (read-only)
    # ------------------------------------------------------------------

    async def get_records(
        self,
        layout: str,
        token: str,
        offset: int = 1,
        limit: int = 20,
    ) -> RecordSet:
        response = await self.get(
            f"{_layout_path(layout)}/records",
            token,
            params={"_offset": int(offset), "_limit": int(limit)},
        )
        return RecordSet.from_api(response.data if isinstance(response.data, dict) else {})

    async def get_record(self, layout: str, record_id: str, token: str) -> RecordSet:
        response = await self.get(
            f"{_layout_path(layout)}/records/{quote(str(record_id), safe='')}", token
        )
        return RecordSet.from_api(response.data if isinstance(response.data, dict) else {})

    async def find_records(
        self,
        layout: str,
        token: str,
        query: List[Dict[str, Any]],
        sort: Optional[List[Dict[str, Any]]] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> RecordSet:
        """POST /layouts/{layout}/_find; each query entry is OR-ed."""
        body: Dict[str, Any] = {"query": query}
        if sort:
            body["sort"] = sort
        if offset is not None:
            body["offset"] = int(offset)
        if limit is not None:
            body["limit"] = int(limit)

        response = await self.post(f"{_layout_path(layout)}/_find", token, body)
        return RecordSet.from_api(response.data if isinstance(response.data, dict) else {})
