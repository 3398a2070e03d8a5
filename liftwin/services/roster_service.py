"""
Roster editing.

Every function takes a snapshot and returns a new one; the input snapshot
is never modified, so callers can hand the result straight to the autosaver.
"""
from __future__ import annotations

import secrets
from typing import Any, List, Optional

from liftwin.schemas import Athlete, EventState
from liftwin.validators import AthleteEntry


def new_athlete_id() -> str:
    """Short random id, unique enough within one event."""
    return secrets.token_hex(4)


def _unused_id(state: EventState) -> str:
    taken = {a.id for a in state.athletes}
    while True:
        candidate = new_athlete_id()
        if candidate not in taken:
            return candidate


def add_athlete(state: EventState, name: str = "New Athlete", **fields: Any) -> EventState:
    """Append an athlete with a fresh id."""
    athlete = Athlete(id=_unused_id(state), name=name, **fields)
    return state.model_copy(update={"athletes": [*state.athletes, athlete]})


def update_athlete(state: EventState, athlete_id: str, **patch: Any) -> EventState:
    """
    Apply a field patch to one athlete. The id itself cannot be changed.
    Raises KeyError for an unknown id and pydantic.ValidationError for bad values.
    """
    patch.pop("id", None)
    athletes = []
    found = False
    for a in state.athletes:
        if a.id == athlete_id:
            a = Athlete.model_validate({**a.model_dump(), **patch})
            found = True
        athletes.append(a)
    if not found:
        raise KeyError(athlete_id)
    return state.model_copy(update={"athletes": athletes})


def apply_entry(state: EventState, athlete_id: str, entry: AthleteEntry) -> EventState:
    """Apply a raw form row (see AthleteEntry) to one athlete."""
    return update_athlete(state, athlete_id, **entry.to_patch())


def remove_athlete(state: EventState, athlete_id: str) -> EventState:
    return state.model_copy(
        update={"athletes": [a for a in state.athletes if a.id != athlete_id]}
    )


def clear_results(state: EventState) -> EventState:
    """Keep names and bodyweights, wipe lifts and run times."""
    athletes = [
        a.model_copy(update={"squat": None, "bench": None, "deadlift": None, "run_time": ""})
        for a in state.athletes
    ]
    return state.model_copy(update={"athletes": athletes})


def set_points(state: EventState, preset: str, custom: Optional[List[float]] = None) -> EventState:
    """Switch the points preset; ``custom`` replaces the custom table when given."""
    data = state.model_dump()
    data["points_preset"] = preset
    if custom is not None:
        data["points_custom"] = custom
    return EventState.model_validate(data)


def rename_event(state: EventState, title: str) -> EventState:
    return state.model_copy(update={"title": title})
