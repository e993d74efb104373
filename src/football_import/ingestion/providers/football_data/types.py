from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from football_import.ingestion.providers.base.errors import PayloadDecodeError

PayloadT = TypeVar("PayloadT", bound="Payload")


class Payload(BaseModel):
    """Base for football-data.org response fragments. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class AreaPayload(Payload):
    name: str


class CompetitionPayload(Payload):
    name: str
    code: str
    area: AreaPayload

    @property
    def area_name(self) -> str:
        return self.area.name


class TeamPayload(Payload):
    id: int
    name: str
    tla: str | None = None
    short_name: str | None = Field(default=None, alias="shortName")
    area: AreaPayload | None = None
    address: str | None = None

    @property
    def area_name(self) -> str | None:
        return self.area.name if self.area is not None else None


class CompetitionTeamsPayload(Payload):
    teams: list[TeamPayload] = Field(default_factory=list)


class SquadMemberPayload(Payload):
    name: str
    position: str | None = None
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    nationality: str | None = None
    role: str | None = None


class CoachPayload(Payload):
    # football-data sends `"coach": {"id": null, "name": null, ...}` for some teams.
    name: str | None = None
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    nationality: str | None = None


class TeamSquadPayload(Payload):
    coach: CoachPayload | None = None
    squad: list[SquadMemberPayload] = Field(default_factory=list)

    @property
    def named_coach(self) -> CoachPayload | None:
        if self.coach is None or not (self.coach.name or "").strip():
            return None
        return self.coach


class SquadRole(StrEnum):
    PLAYER = "PLAYER"
    COACH = "COACH"


def classify_squad_member(member: SquadMemberPayload) -> SquadRole | None:
    """Map an upstream squad role onto PLAYER/COACH.

    No role at all means player. Anything that names neither a player nor a
    coach/manager is unclassifiable and returns None.
    """

    if not member.role:
        return SquadRole.PLAYER

    role = member.role.upper()
    if "PLAYER" in role:
        return SquadRole.PLAYER
    if "COACH" in role or "MANAGER" in role:
        return SquadRole.COACH
    return None


def decode_payload(model: type[PayloadT], data: Any, *, path: str) -> PayloadT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PayloadDecodeError(path, str(e)) from e
