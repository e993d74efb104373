from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .errors import PayloadDecodeError, RateLimited, TransportError, UpstreamError

logger = logging.getLogger(__name__)

Json = dict[str, Any]


def _parse_seconds(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return resp.reason_phrase or "Upstream error"


@dataclass
class BaseHttpClient:
    """
    Provider-agnostic HTTP client wrapper.

    - Uses a single underlying httpx.Client for connection pooling.
    - Maps failures onto TransportError / UpstreamError / RateLimited / PayloadDecodeError.
    - Never retries; pacing and backoff live one layer up.
    """

    base_url: str
    timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    headers: Mapping[str, str] = field(default_factory=dict)

    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s),
            headers=dict(self.headers),
            transport=self.transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        """
        GET `path` and return the parsed JSON object.
        Raises TransportError, RateLimited, UpstreamError or PayloadDecodeError.
        """
        logger.info("Requesting %s", path)
        try:
            resp = self._client.get(path.lstrip("/"), params=params, headers=headers)
        except httpx.TransportError as e:
            logger.error("Transport failure for %s: %s", path, e)
            raise TransportError(str(e) or e.__class__.__name__) from e

        if resp.status_code == 429:
            retry_after = _parse_seconds(resp.headers.get("Retry-After"))
            if retry_after is None:
                retry_after = _parse_seconds(resp.headers.get("X-RequestCounter-Reset"))
            raise RateLimited(_error_message(resp), retry_after_seconds=retry_after)

        if resp.is_error:
            message = _error_message(resp)
            logger.error("Error requesting %s: HTTP %s %s", path, resp.status_code, message)
            raise UpstreamError(resp.status_code, message)

        try:
            data = resp.json()
        except ValueError as e:
            raise PayloadDecodeError(path, "response was not valid JSON") from e

        if not isinstance(data, dict):
            raise PayloadDecodeError(path, f"expected JSON object, got {type(data).__name__}")

        return data
