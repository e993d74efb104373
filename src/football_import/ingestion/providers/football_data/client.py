from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from football_import.core.config import Settings
from football_import.ingestion.providers.base.client import BaseHttpClient, Json
from football_import.ingestion.providers.base.errors import RateLimited
from football_import.ingestion.providers.football_data.types import (
    CompetitionPayload,
    CompetitionTeamsPayload,
    TeamSquadPayload,
    decode_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Reactive backoff for HTTP 429 responses.

    Waits the server-suggested delay when one is given, otherwise
    `base_delay_s * 2**attempt`. Only RateLimited is retried; every other
    error surfaces on first occurrence.
    """

    max_retries: int = 3
    base_delay_s: float = 1.0

    _sleep: Callable[[float], Any] = field(default=time.sleep, repr=False)

    def delay_for(self, attempt: int, error: RateLimited) -> float:
        if error.retry_after_seconds is not None:
            return error.retry_after_seconds
        return self.base_delay_s * (2**attempt)

    def call(
        self,
        fn: Callable[[], T],
        *,
        label: str = "request",
        max_retries: int | None = None,
    ) -> T:
        limit = self.max_retries if max_retries is None else max_retries
        attempt = 0
        while True:
            try:
                return fn()
            except RateLimited as e:
                if attempt >= limit:
                    logger.error("%s still rate limited after %d retries", label, attempt)
                    raise
                delay = self.delay_for(attempt, e)
                logger.warning(
                    "%s rate limited (attempt %d/%d); retrying in %.1fs",
                    label,
                    attempt + 1,
                    limit + 1,
                    delay,
                )
                self._sleep(delay)
                attempt += 1


@dataclass
class FootballDataClient:
    http: BaseHttpClient
    api_key: str
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def _headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self.api_key}

    def get(self, path: str) -> Json:
        return self.http.get_json(path, headers=self._headers())

    def fetch_with_retry(self, path: str, *, max_retries: int | None = None) -> Json:
        return self.retry.call(
            lambda: self.get(path), label=f"GET {path}", max_retries=max_retries
        )

    def get_competition(self, code: str) -> CompetitionPayload:
        path = f"/competitions/{code}"
        return decode_payload(CompetitionPayload, self.fetch_with_retry(path), path=path)

    def get_competition_teams(self, code: str) -> CompetitionTeamsPayload:
        path = f"/competitions/{code}/teams"
        return decode_payload(CompetitionTeamsPayload, self.fetch_with_retry(path), path=path)

    def get_team_squad(self, team_id: int) -> TeamSquadPayload:
        path = f"/teams/{team_id}"
        return decode_payload(TeamSquadPayload, self.fetch_with_retry(path), path=path)

    def close(self) -> None:
        self.http.close()


def build_football_data_client(settings: Settings) -> FootballDataClient:
    http = BaseHttpClient(
        base_url=settings.football_data_base_url,
        timeout_s=settings.http_timeout_s,
    )
    return FootballDataClient(
        http=http,
        api_key=settings.require_football_data_api_key(),
        retry=RetryPolicy(
            max_retries=settings.max_retries,
            base_delay_s=settings.retry_base_delay_s,
        ),
    )
