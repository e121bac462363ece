"""HTTP transport for the workbook's tRPC procedures."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Protocol

import aiohttp

from weekyear._constants import TRPC_PATH, USER_AGENT
from weekyear._redact import redact_for_log
from weekyear.config import WorkbookConfig
from weekyear.exceptions import (
    WeekYearApiError,
    WeekYearAuthenticationError,
    WeekYearNotFoundError,
    WeekYearOfflineError,
    WeekYearTransportError,
    WeekYearValidationError,
)

_logger = logging.getLogger(__name__)

_ERROR_CLASSES: dict[str, type[WeekYearApiError]] = {
    "UNAUTHORIZED": WeekYearAuthenticationError,
    "FORBIDDEN": WeekYearAuthenticationError,
    "BAD_REQUEST": WeekYearValidationError,
    "NOT_FOUND": WeekYearNotFoundError,
}


class Transport(Protocol):
    """Structural transport interface used by :class:`~weekyear.client.WorkbookClient`.

    Tests pass simple doubles implementing these two coroutines.
    """

    async def query(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        ...

    async def mutate(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        ...


def encode_input(payload: Any) -> dict[str, Any]:
    """Wrap *payload* in the server's ``{"json", "meta"}`` envelope.

    Datetimes become ISO 8601 strings and their dotted paths are listed
    under ``meta.values`` so the server rebuilds them as dates.
    """
    dates: dict[str, list[str]] = {}

    def _walk(value: Any, path: list[str]) -> Any:
        if isinstance(value, (datetime, date)):
            dates[".".join(path)] = ["Date"]
            return value.isoformat()
        if isinstance(value, Mapping):
            return {str(k): _walk(v, [*path, str(k)]) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_walk(v, [*path, str(i)]) for i, v in enumerate(value)]
        return value

    envelope: dict[str, Any] = {"json": _walk(payload, [])}
    if dates:
        envelope["meta"] = {"values": dates}
    return envelope


def decode_result(procedure: str, body: Any, http_status: int) -> Any:
    """Unwrap a tRPC response body or raise the matching error."""
    if not isinstance(body, dict):
        raise WeekYearTransportError(
            f"Unexpected response shape from {procedure}",
            status_code=http_status,
            endpoint=procedure,
        )

    error = body.get("error")
    if isinstance(error, dict):
        detail = error.get("json", error)
        data = detail.get("data") if isinstance(detail, dict) else None
        code = str(data.get("code", "")) if isinstance(data, dict) else ""
        message = str(detail.get("message", "")) if isinstance(detail, dict) else ""
        status = data.get("httpStatus", http_status) if isinstance(data, dict) else http_status
        error_cls = _ERROR_CLASSES.get(code, WeekYearApiError)
        raise error_cls(
            f"{procedure} failed: code={code or 'UNKNOWN'} message={message}",
            code=code,
            procedure=procedure,
            http_status=status,
        )

    result = body.get("result")
    if not isinstance(result, dict) or "data" not in result:
        raise WeekYearTransportError(
            f"Missing 'result.data' in response from {procedure}",
            status_code=http_status,
            endpoint=procedure,
        )
    data = result["data"]
    if isinstance(data, dict) and "json" in data:
        return data["json"]
    return data


class TrpcTransport:
    """aiohttp transport speaking the web app's tRPC wire format."""

    def __init__(self, config: WorkbookConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._config.session_cookie:
            headers["cookie"] = f"{self._config.session_cookie_name}={self._config.session_cookie}"
        return headers

    def _url(self, procedure: str) -> str:
        return f"{self._config.base_url}{TRPC_PATH}/{procedure}"

    async def query(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        """Run a query procedure (HTTP GET)."""
        params = {"input": json.dumps(encode_input(payload), separators=(",", ":"))}
        return await self._request("GET", procedure, params=params)

    async def mutate(self, procedure: str, payload: Mapping[str, Any] | None = None) -> Any:
        """Run a mutation procedure (HTTP POST)."""
        body = json.dumps(encode_input(payload), separators=(",", ":"))
        return await self._request("POST", procedure, data=body)

    async def _request(
        self,
        method: str,
        procedure: str,
        *,
        params: Mapping[str, str] | None = None,
        data: str | None = None,
    ) -> Any:
        url = self._url(procedure)
        headers = self._headers()
        if data is not None:
            headers["content-type"] = "application/json"

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("%s %s input=%s", method, url, redact_for_log(params or data))

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as exc:
            raise WeekYearOfflineError(
                f"Cannot reach {url}: {exc or type(exc).__name__}",
                endpoint=procedure,
            ) from exc
        except aiohttp.ClientError as exc:
            raise WeekYearTransportError(
                f"Request to {procedure} failed: {exc}",
                endpoint=procedure,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise WeekYearTransportError(
                f"HTTP {status} from {procedure}: {text[:200]}",
                status_code=status,
                endpoint=procedure,
            ) from exc

        result = decode_result(procedure, body, status)
        if status != 200:
            # A non-200 answer without an error envelope is still a failure.
            raise WeekYearTransportError(
                f"HTTP {status} from {procedure}",
                status_code=status,
                endpoint=procedure,
            )
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("%s ok result=%s", procedure, redact_for_log(result))
        return result
