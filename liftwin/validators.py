"""
Input parsing for free-text roster fields.

Form widgets hand over raw strings; everything here turns them into
finite numbers or an explicit "absent" value. Nothing in this module
raises on bad input: malformed text is treated as not entered.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, field_validator


# ─────────────────────────── Numbers ─────────────────────────────────────────

def parse_number_or_null(value: Any) -> Optional[float]:
    """
    Parse a decimal number from form input.

    Empty / missing input and anything that is not a finite number yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    text = str(value).strip()
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_points_list(text: Optional[str]) -> List[float]:
    """
    Parse a comma-separated custom points table, e.g. "12, 9, 7, 5".
    Blank and non-numeric items are skipped.
    """
    if not text:
        return []
    points = []
    for item in text.split(","):
        n = parse_number_or_null(item)
        if n is not None:
            points.append(n)
    return points


# ─────────────────────────── Clock times ─────────────────────────────────────

@dataclass(frozen=True)
class ClockTime:
    """
    Result of parsing a clock-time field.

    ``status`` is one of:
      - "ok"      : ``seconds`` holds the parsed duration
      - "empty"   : nothing entered yet (not an error)
      - "invalid" : text present but malformed
    """
    status:  Literal["ok", "empty", "invalid"]
    seconds: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return self.status == "ok"

    @property
    def is_empty(self) -> bool:
        return self.status == "empty"


_EMPTY   = ClockTime("empty")
_INVALID = ClockTime("invalid")

# Multipliers for 1, 2 and 3 colon-separated parts
_CLOCK_UNITS = {
    1: (1,),
    2: (60, 1),
    3: (3600, 60, 1),
}


def parse_clock_time(text: Optional[str]) -> ClockTime:
    """
    Parse "ss", "mm:ss" or "hh:mm:ss" into seconds.

    Examples: "45" → 45, "2:03" → 123, "1:02:03" → 3723.
    Any empty or non-numeric part, or more than three parts, is invalid.
    """
    if text is None or text == "":
        return _EMPTY

    parts = [p.strip() for p in str(text).split(":")]
    units = _CLOCK_UNITS.get(len(parts))
    if units is None:
        return _INVALID

    seconds = 0.0
    for part, unit in zip(parts, units):
        if not part or "_" in part:
            return _INVALID
        try:
            value = float(part)
        except ValueError:
            return _INVALID
        if not math.isfinite(value):
            return _INVALID
        seconds += value * unit
    return ClockTime("ok", seconds)


def clock_seconds(text: Optional[str]) -> Optional[float]:
    """Seconds for a well-formed clock string, else None."""
    return parse_clock_time(text).seconds


def format_clock_time(seconds: Optional[float]) -> str:
    """Render seconds as "m:ss" or "h:mm:ss", rounded to the nearest second."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return ""
    total = int(round(seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


# ─────────────────────────── Form payloads ───────────────────────────────────

class AthleteEntry(BaseModel):
    """
    Raw athlete row as typed into a form, normalized before it touches a snapshot.

    Numeric fields accept text; anything unparseable becomes None rather than
    a validation error. ``run_time`` is kept verbatim (it is parsed at scoring
    time so that "not timed yet" and "malformed" stay distinguishable).
    """

    name:       Optional[str] = None
    sex:        Optional[Literal["M", "F", "X"]] = None
    age:        Optional[float] = None
    bodyweight: Optional[float] = None
    squat:      Optional[float] = None
    bench:      Optional[float] = None
    deadlift:   Optional[float] = None
    run_time:   Optional[str] = None

    @field_validator("age", "bodyweight", "squat", "bench", "deadlift", mode="before")
    @classmethod
    def validate_number(cls, v: Any) -> Optional[float]:
        return parse_number_or_null(v)

    @field_validator("name", "run_time")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    def to_patch(self) -> Dict[str, Any]:
        """Only the fields that were actually submitted."""
        return self.model_dump(exclude_unset=True)
