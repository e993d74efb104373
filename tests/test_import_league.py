from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

import football_import.db.models  # noqa: F401
from football_import.core.config import Settings
from football_import.db.base import Base
from football_import.db.models.core.coach import Coach
from football_import.db.models.core.competition import Competition
from football_import.db.models.core.player import Player
from football_import.db.models.core.team import Team
from football_import.ingestion import import_league as import_league_module
from football_import.ingestion.import_league import LeagueImporter, import_league
from football_import.ingestion.providers.base.client import BaseHttpClient
from football_import.ingestion.providers.base.errors import NotFoundError, UpstreamError
from football_import.ingestion.providers.football_data.client import (
    FootballDataClient,
    RetryPolicy,
)
from football_import.ingestion.reconcile import Reconciler
from football_import.ingestion.status import ImportStatusTracker

BASE_URL = "https://api.football-data.org/v4"

Handler = Callable[[httpx.Request], httpx.Response]


def _make_session() -> Session:
    engine = sa.create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return Session(engine)


def _count(session: Session, model: type) -> int:
    return session.execute(sa.select(sa.func.count()).select_from(model)).scalar_one()


def _counts(session: Session) -> tuple[int, int, int, int]:
    counts = (
        _count(session, Competition),
        _count(session, Team),
        _count(session, Player),
        _count(session, Coach),
    )
    session.commit()
    return counts


class FakeUpstream:
    """Routes football-data paths to canned JSON; callables may raise or vary responses."""

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v4")
        self.requests.append(path)
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"message": f"{path} not found"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)


class RecordingTracker(ImportStatusTracker):
    def __init__(self) -> None:
        super().__init__()
        self.progress_values: list[int] = []

    def start(self, league_code: str, total_teams: int) -> None:
        super().start(league_code, total_teams)
        self.progress_values.append(self.get_status().progress)

    def advance(self, teams_processed: int) -> None:
        super().advance(teams_processed)
        self.progress_values.append(self.get_status().progress)

    def complete(self) -> None:
        super().complete()
        self.progress_values.append(self.get_status().progress)


def _make_importer(
    upstream: Handler,
    *,
    tracker: ImportStatusTracker | None = None,
    team_import_limit: int = 5,
) -> tuple[LeagueImporter, list[float], list[float]]:
    delay_sleeps: list[float] = []
    retry_sleeps: list[float] = []
    http = BaseHttpClient(base_url=BASE_URL, transport=httpx.MockTransport(upstream))
    client = FootballDataClient(
        http=http,
        api_key="test",
        retry=RetryPolicy(max_retries=3, base_delay_s=1.0, _sleep=retry_sleeps.append),
    )
    importer = LeagueImporter(
        client=client,
        tracker=tracker or ImportStatusTracker(),
        request_delay_s=6.0,
        team_import_limit=team_import_limit,
        _sleep=delay_sleeps.append,
    )
    return importer, delay_sleeps, retry_sleeps


def _competition(code: str = "PL") -> dict[str, Any]:
    return {"id": 2021, "name": "Premier League", "code": code, "area": {"name": "England"}}


def _team(team_id: int, name: str) -> dict[str, Any]:
    return {
        "id": team_id,
        "name": name,
        "tla": name[:3].upper(),
        "shortName": name.split()[0],
        "area": {"name": "England"},
        "address": f"{name} Stadium",
    }


def _connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection reset", request=request)


def _pl_routes() -> dict[str, Any]:
    return {
        "/competitions/PL": _competition(),
        "/competitions/PL/teams": {"teams": [_team(57, "Team A"), _team(61, "Team B")]},
        "/teams/57": {
            "coach": {"id": None, "name": None},
            "squad": [
                {"name": "Player One", "position": "Midfield", "role": "PLAYER"},
                {"name": "Manager One", "nationality": "Spain", "role": "MANAGER"},
            ],
        },
        "/teams/61": _connect_error,
    }


def test_import_league_scenario_with_isolated_squad_failure() -> None:
    session = _make_session()
    tracker = ImportStatusTracker()
    importer, delay_sleeps, retry_sleeps = _make_importer(FakeUpstream(_pl_routes()), tracker=tracker)

    competition = importer.import_league(session, "PL")

    assert competition.code == "PL"
    assert competition.area_name == "England"
    assert [t.name for t in competition.teams] == ["Team A", "Team B"]

    team_a, team_b = competition.teams
    assert [p.name for p in team_a.players] == ["Player One"]
    assert [c.name for c in team_a.coaches] == ["Manager One"]
    assert team_b.players == []
    assert [c.name for c in team_b.coaches] == ["Coach of Team B"]
    assert [c.code for c in team_b.competitions] == ["PL"]

    status = tracker.get_status()
    assert status.is_importing is False
    assert status.progress == 100
    assert status.teams_processed == 1
    assert status.total_teams == 2
    assert status.error is None

    assert delay_sleeps == [6.0, 6.0]
    assert retry_sleeps == []

    result = importer.last_result
    assert result is not None
    assert result.failed_teams == ["Team B"]
    assert result.placeholder_coaches_created == 1


def test_import_league_is_idempotent() -> None:
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream(_pl_routes()))

    importer.import_league(session, "PL")
    first = _counts(session)

    importer.import_league(session, "pl")
    second = _counts(session)

    assert first == (1, 2, 1, 2)
    assert second == first


def test_import_league_progress_is_monotonic() -> None:
    routes = _pl_routes()
    routes["/competitions/PL/teams"] = {
        "teams": [_team(57, "Team A"), _team(61, "Team B"), _team(62, "Team C")]
    }
    routes["/teams/62"] = {"squad": []}
    tracker = RecordingTracker()
    importer, _, _ = _make_importer(FakeUpstream(routes), tracker=tracker)

    importer.import_league(_make_session(), "PL")

    assert tracker.progress_values == sorted(tracker.progress_values)
    assert tracker.progress_values[-1] == 100
    assert tracker.progress_values == [0, 0, 33, 67, 100]


def test_import_league_caps_team_count() -> None:
    routes = _pl_routes()
    routes["/competitions/PL/teams"] = {"teams": [_team(100 + i, f"Club {i}") for i in range(7)]}
    for i in range(7):
        routes[f"/teams/{100 + i}"] = {"squad": [{"name": f"Player {i}"}]}
    upstream = FakeUpstream(routes)
    tracker = ImportStatusTracker()
    importer, delay_sleeps, _ = _make_importer(upstream, tracker=tracker, team_import_limit=5)

    competition = importer.import_league(_make_session(), "PL")

    assert [t.name for t in competition.teams] == [f"Club {i}" for i in range(5)]
    assert "/teams/105" not in upstream.requests
    assert tracker.get_status().total_teams == 5
    assert len(delay_sleeps) == 5


def test_import_league_stores_member_without_role_as_player() -> None:
    routes = _pl_routes()
    routes["/teams/57"] = {"squad": [{"name": "No Role", "position": "Defence"}]}
    importer, _, _ = _make_importer(FakeUpstream(routes))

    competition = importer.import_league(_make_session(), "PL")

    team_a = competition.teams[0]
    assert [(p.name, p.position) for p in team_a.players] == [("No Role", "Defence")]
    # No coach anywhere in the payload: placeholder fills the gap.
    assert [c.name for c in team_a.coaches] == ["Coach of Team A"]


def test_import_league_drops_referee_without_error() -> None:
    routes = _pl_routes()
    routes["/teams/57"] = {
        "coach": {"name": "Real Coach"},
        "squad": [{"name": "The Referee", "role": "REFEREE"}],
    }
    tracker = ImportStatusTracker()
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream(routes), tracker=tracker)

    competition = importer.import_league(session, "PL")

    team_a = competition.teams[0]
    assert team_a.players == []
    assert [c.name for c in team_a.coaches] == ["Real Coach"]
    names = session.execute(sa.select(Player.name).union(sa.select(Coach.name))).scalars().all()
    assert "The Referee" not in names
    assert tracker.get_status().error is None
    assert importer.last_result is not None
    assert importer.last_result.members_dropped == 1


def test_import_league_retries_rate_limited_squad_fetch() -> None:
    calls = 0

    def limited_once(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            return httpx.Response(429, json={"message": "Too many requests"})
        return httpx.Response(200, json={"squad": [{"name": "Late Player"}]})

    routes = _pl_routes()
    routes["/teams/57"] = limited_once
    importer, delay_sleeps, retry_sleeps = _make_importer(FakeUpstream(routes))

    competition = importer.import_league(_make_session(), "PL")

    assert [p.name for p in competition.teams[0].players] == ["Late Player"]
    assert retry_sleeps == [1.0]
    assert delay_sleeps == [6.0, 6.0]


def test_import_league_rolls_back_when_team_list_fails() -> None:
    routes = _pl_routes()
    routes["/competitions/PL/teams"] = lambda request: httpx.Response(
        500, json={"message": "Internal error"}
    )
    tracker = ImportStatusTracker()
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream(routes), tracker=tracker)

    with pytest.raises(UpstreamError) as exc_info:
        importer.import_league(session, "PL")

    assert exc_info.value.status_code == 500
    assert _counts(session) == (0, 0, 0, 0)

    status = tracker.get_status()
    assert status.is_importing is False
    assert status.error is not None
    assert "Internal error" in status.error


def test_import_league_unknown_code_is_not_found() -> None:
    tracker = ImportStatusTracker()
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream({}), tracker=tracker)

    with pytest.raises(NotFoundError):
        importer.import_league(session, "XX")

    assert tracker.get_status().error == "League with code XX not found upstream"
    assert _counts(session) == (0, 0, 0, 0)


def test_import_league_rejects_blank_code() -> None:
    upstream = FakeUpstream(_pl_routes())
    importer, _, _ = _make_importer(upstream)

    with pytest.raises(ValueError):
        importer.import_league(_make_session(), "   ")

    assert upstream.requests == []


def test_import_league_graph_survives_session_close() -> None:
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream(_pl_routes()))

    competition = importer.import_league(session, "PL")
    session.close()

    graph = {
        team.name: (
            [p.name for p in team.players],
            [c.name for c in team.coaches],
            [c.code for c in team.competitions],
        )
        for team in competition.teams
    }
    assert competition.name == "Premier League"
    assert graph == {
        "Team A": (["Player One"], ["Manager One"], ["PL"]),
        "Team B": ([], ["Coach of Team B"], ["PL"]),
    }


def test_import_league_squad_failure_after_partial_writes_leaves_no_rows(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    original = Reconciler.reconcile_player

    def reconcile_player(self: Reconciler, payload: Any, team: Team) -> Player:
        if payload.name == "Broken Player":
            raise RuntimeError("could not store player")
        return original(self, payload, team)

    monkeypatch.setattr(Reconciler, "reconcile_player", reconcile_player)

    routes = _pl_routes()
    routes["/teams/57"] = {
        "coach": {"name": "Real Coach"},
        "squad": [
            {"name": "Player One", "position": "Midfield"},
            {"name": "Broken Player", "position": "Defence"},
        ],
    }
    tracker = ImportStatusTracker()
    session = _make_session()
    importer, _, _ = _make_importer(FakeUpstream(routes), tracker=tracker)

    competition = importer.import_league(session, "PL")

    team_a = competition.teams[0]
    assert team_a.players == []
    assert [c.name for c in team_a.coaches] == ["Coach of Team A"]
    assert _counts(session) == (1, 2, 0, 2)

    result = importer.last_result
    assert result is not None
    assert result.failed_teams == ["Team A", "Team B"]
    assert result.players_created == 0
    assert result.coaches_created == 0
    assert result.placeholder_coaches_created == 2
    assert tracker.get_status().error is None


def test_import_league_isolates_squad_still_rate_limited_after_retries() -> None:
    routes = _pl_routes()
    routes["/teams/57"] = lambda request: httpx.Response(429, json={"message": "Too many requests"})
    routes["/teams/61"] = {"squad": [{"name": "Player Two", "position": "Offence"}]}
    upstream = FakeUpstream(routes)
    tracker = ImportStatusTracker()
    importer, delay_sleeps, retry_sleeps = _make_importer(upstream, tracker=tracker)

    competition = importer.import_league(_make_session(), "PL")

    team_a, team_b = competition.teams
    assert team_a.players == []
    assert [c.name for c in team_a.coaches] == ["Coach of Team A"]
    assert [p.name for p in team_b.players] == ["Player Two"]

    assert upstream.requests.count("/teams/57") == 4
    assert retry_sleeps == [1.0, 2.0, 4.0]
    assert delay_sleeps == [6.0, 6.0]

    assert importer.last_result is not None
    assert importer.last_result.failed_teams == ["Team A"]
    status = tracker.get_status()
    assert status.is_importing is False
    assert status.progress == 100
    assert status.error is None


def test_module_import_league_builds_client_from_settings_and_closes_it(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    upstream = FakeUpstream(_pl_routes())
    built: list[FootballDataClient] = []
    seen_settings: list[Settings] = []

    def build_client(cfg: Settings) -> FootballDataClient:
        seen_settings.append(cfg)
        http = BaseHttpClient(base_url=BASE_URL, transport=httpx.MockTransport(upstream))
        client = FootballDataClient(
            http=http,
            api_key=cfg.require_football_data_api_key(),
            retry=RetryPolicy(_sleep=lambda s: None),
        )
        built.append(client)
        return client

    monkeypatch.setattr(import_league_module, "build_football_data_client", build_client)

    cfg = Settings(football_data_api_key="test", request_delay_s=0, team_import_limit=1)
    tracker = ImportStatusTracker()

    competition = import_league(_make_session(), "pl", tracker=tracker, settings=cfg)

    assert seen_settings == [cfg]
    assert len(built) == 1
    assert built[0].http._client.is_closed
    assert [t.name for t in competition.teams] == ["Team A"]
    assert "/teams/61" not in upstream.requests
    assert tracker.get_status().total_teams == 1
    assert tracker.get_status().progress == 100


def test_module_import_league_closes_client_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    built: list[FootballDataClient] = []

    def build_client(cfg: Settings) -> FootballDataClient:
        http = BaseHttpClient(base_url=BASE_URL, transport=httpx.MockTransport(FakeUpstream({})))
        client = FootballDataClient(http=http, api_key="test")
        built.append(client)
        return client

    monkeypatch.setattr(import_league_module, "build_football_data_client", build_client)

    with pytest.raises(NotFoundError):
        import_league(
            _make_session(),
            "XX",
            tracker=ImportStatusTracker(),
            settings=Settings(football_data_api_key="test", request_delay_s=0),
        )

    assert built[0].http._client.is_closed
