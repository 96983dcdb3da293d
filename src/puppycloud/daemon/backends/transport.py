# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""HTTP over the engine's Unix domain socket.

Each call to :meth:`EngineTransport.execute` opens its own connection,
sends one request, reads the whole response and closes the connection
again.  Nothing is pooled and nothing is retried; failures surface
straight to the caller as :class:`BackendRequestError`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import EngineConfig
from .errors import BackendRequestError

logger = logging.getLogger(__name__)

USER_AGENT = "puppycloud-backend"

# Engines ignore the host part, but HTTP/1.1 requires one.
_BASE_URL = "http://docker"


@dataclass(frozen=True)
class EngineRequest:
    """Description of one engine API call."""

    method: str
    path: str
    params: Sequence[tuple[str, str]] = ()
    body: Any = None
    headers: Mapping[str, str | None] | None = None


@dataclass(frozen=True)
class EngineResponse:
    """A fully read, successful (< 400) engine response."""

    status_code: int
    headers: httpx.Headers
    body_text: str

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


def _error_from_response(status_code: int, content_type: str, body_text: str) -> BackendRequestError:
    """Build the request error for an engine response with status >= 400."""
    details: Any = body_text
    if "application/json" in content_type:
        try:
            details = json.loads(body_text)
        except ValueError:
            details = body_text

    if isinstance(details, dict) and "message" in details:
        message = str(details["message"])
    else:
        message = body_text
    if not message:
        message = f"Engine API request failed with status {status_code}"
    return BackendRequestError(message, status_code, details)


def parse_json(response: EngineResponse) -> Any:
    """Decode a JSON engine response.

    Raises:
        BackendRequestError: If the engine did not answer with JSON, or the
            body does not decode.  The raw body is attached for diagnosis.
    """
    if "application/json" not in response.content_type:
        raise BackendRequestError(
            "Unexpected response from engine API",
            response.status_code,
            response.body_text,
        )
    try:
        return json.loads(response.body_text)
    except ValueError as e:
        raise BackendRequestError(
            "Failed to parse engine response",
            response.status_code,
            {"raw": response.body_text, "cause": str(e)},
        ) from e


class EngineTransport:
    """Issues single HTTP requests against the engine socket."""

    def __init__(self, config: EngineConfig):
        self._config = config

    @property
    def config(self) -> EngineConfig:
        return self._config

    def _build_headers(self, request: EngineRequest, content: bytes | None) -> httpx.Headers:
        headers = httpx.Headers({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })
        if request.headers:
            for key, value in request.headers.items():
                if value is not None:
                    headers[key] = value
        if content is not None:
            if "content-type" not in headers:
                headers["Content-Type"] = "application/json"
            headers["Content-Length"] = str(len(content))
        return headers

    async def _send(
        self,
        request: EngineRequest,
        headers: httpx.Headers,
        content: bytes | None,
    ) -> httpx.Response:
        transport = httpx.AsyncHTTPTransport(uds=self._config.socket_path)
        async with httpx.AsyncClient(
            transport=transport,
            base_url=_BASE_URL,
            timeout=self._config.request_timeout,
        ) as client:
            return await client.request(
                request.method,
                request.path,
                params=list(request.params) or None,
                content=content,
                headers=headers,
            )

    async def execute(self, request: EngineRequest) -> EngineResponse:
        """Execute *request* and return the fully read response.

        Raises:
            BackendRequestError: 504 on timeout, 503 on connection failure,
                502 on an undecodable body, or the engine's own status for
                responses >= 400.
        """
        content = None
        if request.body is not None:
            content = json.dumps(request.body).encode("utf-8")
        headers = self._build_headers(request, content)

        try:
            response = await asyncio.wait_for(
                self._send(request, headers, content),
                timeout=self._config.request_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                "%s %s timed out after %d ms",
                request.method, request.path, self._config.request_timeout_ms,
            )
            raise BackendRequestError("Engine API request timed out", 504, {"cause": e}) from e
        except httpx.DecodingError as e:
            logger.warning("%s %s returned an undecodable body: %s", request.method, request.path, e)
            raise BackendRequestError("Failed to parse engine response", 502, {"cause": e}) from e
        except httpx.RequestError as e:
            logger.warning(
                "%s %s failed on %s: %s",
                request.method, request.path, self._config.socket_path, e,
            )
            raise BackendRequestError(
                str(e) or "Engine connection failed", 503, {"cause": e}
            ) from e

        logger.debug("%s %s -> %d", request.method, request.path, response.status_code)

        body_text = response.content.decode("utf-8", errors="replace")
        if response.status_code >= 400:
            raise _error_from_response(
                response.status_code,
                response.headers.get("content-type", ""),
                body_text,
            )

        return EngineResponse(
            status_code=response.status_code,
            headers=response.headers,
            body_text=body_text,
        )
