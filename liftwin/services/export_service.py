"""
File export shapes for an event.

JSON export
-----------
    {"eventId": "<eid>", "snapshot": {…EventState…}}

CSV export
----------
Row 1:    Place,Athlete,StrengthPts,5kPts,TotalPts
Row 2…:   one row per leaderboard entry, in leaderboard order
Every value is quoted; quotes inside values are doubled.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from liftwin.schemas import EID, EventState
from liftwin.services.ranking_service import LeaderboardRow, format_points

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Place", "Athlete", "StrengthPts", "5kPts", "TotalPts"]


def event_json(eid: EID, state: EventState) -> str:
    data = {
        "eventId":  eid,
        "snapshot": state.model_dump(mode="json", by_alias=True),
    }
    return json.dumps(data, ensure_ascii=False, indent=2)


class EventExport(BaseModel):
    """Top-level shape of a JSON export file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    event_id: Any = None
    snapshot: EventState


def read_event_json(text: str) -> Optional[Tuple[Optional[EID], EventState]]:
    """Parse a JSON export back into (eid, snapshot); None if it is not one."""
    try:
        export = EventExport.model_validate_json(text)
    except ValidationError as exc:
        logger.warning("Not a valid JSON export: %d error(s)", exc.error_count())
        return None
    eid = export.event_id
    return (eid if isinstance(eid, str) and eid else None), export.snapshot


def leaderboard_rows(rows: Sequence[LeaderboardRow]) -> List[List[str]]:
    return [
        [
            str(place),
            r.name,
            format_points(r.strength_points),
            format_points(r.run_points),
            format_points(r.total),
        ]
        for place, r in enumerate(rows, start=1)
    ]


def leaderboard_csv(rows: Sequence[LeaderboardRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(leaderboard_rows(rows))
    return buf.getvalue()
