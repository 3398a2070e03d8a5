"""
Snapshot schemas — Pydantic v2 models.

These are the units of persistence and of sharing. Attribute names are
snake_case; the serialized form uses camelCase keys (``runTime``,
``pointsPreset``…) so snapshots stay readable by older share links.
"""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from liftwin.models.models import PointsPreset

EID = str

_SNAPSHOT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    allow_inf_nan=False,
    extra="ignore",
)


class Athlete(BaseModel):
    """
    One roster entry.

    Attributes
    ----------
    id         : opaque id, unique and immutable within the event
    sex        : "M" / "F" are scored for strength, "X" never is
    bodyweight : kg, None when not entered
    squat, bench, deadlift : best single in kg, None when not entered
    run_time   : free clock string (ss / mm:ss / hh:mm:ss), "" = not timed yet
    """

    model_config = _SNAPSHOT_CONFIG

    id: str = Field(..., min_length=1)
    name: str = ""
    sex: Literal["M", "F", "X"] = "M"
    age: Optional[float] = None
    bodyweight: Optional[float] = None
    squat: Optional[float] = None
    bench: Optional[float] = None
    deadlift: Optional[float] = None
    run_time: str = ""

    @field_validator("run_time", mode="before")
    @classmethod
    def validate_run_time(cls, v: object) -> object:
        return "" if v is None else v


class EventState(BaseModel):
    """Full saved state of one event: title, scoring config and roster."""

    model_config = _SNAPSHOT_CONFIG

    title: str = "Monthly Meet"
    points_preset: Literal["F1", "Simple", "Custom"] = PointsPreset.F1
    points_custom: List[float] = Field(
        default_factory=lambda: list(PointsPreset.TABLES[PointsPreset.SIMPLE])
    )
    athletes: List[Athlete] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "EventState":
        seen: set[str] = set()
        for a in self.athletes:
            if a.id in seen:
                raise ValueError(f"duplicate athlete id: {a.id}")
            seen.add(a.id)
        return self

    def athlete(self, athlete_id: str) -> Optional[Athlete]:
        for a in self.athletes:
            if a.id == athlete_id:
                return a
        return None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class EventMeta(BaseModel):
    """Index entry used for listing events without loading their rosters."""

    model_config = _SNAPSHOT_CONFIG

    eid: EID = Field(..., min_length=1)
    title: str = ""
    created_at: int   # epoch ms
    updated_at: int   # epoch ms


class SharePayload(BaseModel):
    """What travels inside a share link: the event id (optional) and its snapshot."""

    model_config = _SNAPSHOT_CONFIG

    eid: Optional[EID] = None
    state: EventState


EventIndex = TypeAdapter(List[EventMeta])
