from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class ImportStatus:
    is_importing: bool = False
    league_code: str | None = None
    progress: int = 0
    teams_processed: int = 0
    total_teams: int = 0
    last_updated: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "isImporting": self.is_importing,
            "leagueCode": self.league_code,
            "progress": self.progress,
            "teamsProcessed": self.teams_processed,
            "totalTeams": self.total_teams,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
            "error": self.error,
        }


class ImportStatusTracker:
    """Progress of the league import currently (or most recently) running.

    One import is tracked at a time; `start` overwrites whatever came before.
    The importer is the only writer. Readers get an immutable snapshot and may
    see a slightly stale one. The tracker is process memory, not part of the DB
    transaction, so `complete` does not prove the import's writes were committed.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._status = ImportStatus()

    def start(self, league_code: str, total_teams: int) -> None:
        with self._lock:
            self._status = ImportStatus(
                is_importing=True,
                league_code=league_code,
                progress=0,
                teams_processed=0,
                total_teams=total_teams,
                last_updated=self._clock(),
                error=None,
            )

    def advance(self, teams_processed: int) -> None:
        with self._lock:
            total = self._status.total_teams
            # Half-up rounding; round() would send 12.5 to 12.
            progress = int(teams_processed * 100 / total + 0.5) if total > 0 else 0
            self._status = replace(
                self._status,
                teams_processed=teams_processed,
                progress=progress,
                last_updated=self._clock(),
            )

    def complete(self) -> None:
        with self._lock:
            self._status = replace(
                self._status,
                is_importing=False,
                progress=100,
                last_updated=self._clock(),
            )

    def fail(self, message: str) -> None:
        with self._lock:
            self._status = replace(
                self._status,
                is_importing=False,
                error=message,
                last_updated=self._clock(),
            )

    def reset(self) -> None:
        with self._lock:
            self._status = ImportStatus()

    def get_status(self) -> ImportStatus:
        with self._lock:
            return self._status


# Created once per process; pass it explicitly to importers and status readers.
default_tracker = ImportStatusTracker()
