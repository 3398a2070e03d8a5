"""
Ranking engine for the Monthly Meet.

Algorithm (per discipline)
--------------------------
1. Score every athlete (DOTS for strength, run index for the 5k).
   Athletes without a score are "unscored" and placed last.
2. Sort: score DESC; unscored keep their roster order behind everyone else.
3. Walk the sorted list once. A run of identical scores shares the sum of
   the points-table values for the ranks it occupies, split evenly
   (e.g. two athletes tied for 1st on 25-18-… both get 21.5).
4. Ranks beyond the end of the points table are worth 0; unscored get 0.

Leaderboard
-----------
Strength points + run points per athlete, sorted by total DESC.
Ties are not broken further: roster order decides who is listed first.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from liftwin.models.models import Discipline, PointsPreset
from liftwin.schemas import Athlete, EventState
from liftwin.services.formula_service import athlete_total, run_score, strength_score
from liftwin.validators import clock_seconds


@dataclass
class DisciplineResult:
    """A single ranked row of one discipline table."""
    athlete_id: str
    name:       str
    score:      Optional[float]   # None = unscored
    points:     float = 0.0
    place:      Optional[int] = None   # None = unscored

    @property
    def is_scored(self) -> bool:
        return self.score is not None


@dataclass
class LeaderboardRow:
    """Combined standing of one athlete."""
    athlete_id:      str
    name:            str
    strength_points: float
    run_points:      float

    @property
    def total(self) -> float:
        return self.strength_points + self.run_points


@dataclass
class EventResults:
    """Everything a front end needs to render one event."""
    strength:     List[DisciplineResult] = field(default_factory=list)
    run:          List[DisciplineResult] = field(default_factory=list)
    leaderboard:  List[LeaderboardRow] = field(default_factory=list)
    points_table: List[float] = field(default_factory=list)


# ─────────────────────────── Points tables ───────────────────────────────────

def points_table_for(state: EventState) -> List[float]:
    """Resolve the event's preset; an empty custom table falls back to Simple."""
    preset = state.points_preset
    if preset == PointsPreset.CUSTOM:
        if state.points_custom:
            return list(state.points_custom)
        return list(PointsPreset.TABLES[PointsPreset.SIMPLE])
    return list(PointsPreset.TABLES.get(preset, PointsPreset.TABLES[PointsPreset.SIMPLE]))


def active_points_table(table: Sequence[float], roster_size: int) -> List[float]:
    """The table as it applies to this roster: truncated or zero-padded."""
    n = max(roster_size, 0)
    if len(table) >= n:
        return list(table[:n])
    return list(table) + [0.0] * (n - len(table))


# ─────────────────────────── Allocation ──────────────────────────────────────

def _sorted_by_score(
    entries: Sequence[Tuple[str, Optional[float]]],
) -> List[Tuple[str, Optional[float]]]:
    # sorted() is stable, so unscored entries and exact ties keep input order
    return sorted(entries, key=lambda e: (e[1] is None, -(e[1] or 0.0)))


def allocate_points(
    entries: Sequence[Tuple[str, Optional[float]]],
    points_table: Sequence[float],
) -> Dict[str, float]:
    """
    Convert (athlete_id, score) pairs into awarded points.

    Every id in ``entries`` is present in the result. Ties are detected by
    exact float equality and share the average of the tied ranks' points.
    """
    ordered = _sorted_by_score(entries)
    result: Dict[str, float] = {}

    i = 0
    while i < len(ordered):
        score = ordered[i][1]
        if score is None:
            for athlete_id, _ in ordered[i:]:
                result[athlete_id] = 0.0
            break

        j = i + 1
        while j < len(ordered) and ordered[j][1] == score:
            j += 1

        pool = sum(points_table[k] if k < len(points_table) else 0.0 for k in range(i, j))
        per_head = pool / (j - i)
        for athlete_id, _ in ordered[i:j]:
            result[athlete_id] = per_head
        i = j

    return result


def rank_discipline(
    athletes: Sequence[Athlete],
    scorer: Callable[[Athlete], Optional[float]],
    points_table: Sequence[float],
) -> List[DisciplineResult]:
    """Score, sort and award points for one discipline."""
    names  = {a.id: a.name for a in athletes}
    scored = [(a.id, scorer(a)) for a in athletes]
    points = allocate_points(scored, points_table)

    rows: List[DisciplineResult] = []
    for i, (athlete_id, score) in enumerate(_sorted_by_score(scored)):
        row = DisciplineResult(
            athlete_id=athlete_id,
            name=names[athlete_id],
            score=score,
            points=points[athlete_id],
        )
        if score is not None:
            if rows and rows[-1].score == score:
                row.place = rows[-1].place
            else:
                row.place = i + 1
        rows.append(row)
    return rows


# ─────────────────────────── Leaderboard ─────────────────────────────────────

def build_leaderboard(
    athletes: Sequence[Athlete],
    strength_points: Mapping[str, float],
    run_points: Mapping[str, float],
) -> List[LeaderboardRow]:
    """
    One row per roster athlete, sorted by total points DESC.
    Athletes missing from a discipline mapping get 0 for it.
    """
    rows = [
        LeaderboardRow(
            athlete_id=a.id,
            name=a.name,
            strength_points=strength_points.get(a.id, 0.0),
            run_points=run_points.get(a.id, 0.0),
        )
        for a in athletes
    ]
    rows.sort(key=lambda r: -r.total)
    return rows


def score_event(state: EventState) -> EventResults:
    """Run the full scoring pipeline for one snapshot."""
    table    = points_table_for(state)
    strength = rank_discipline(state.athletes, strength_score, table)
    run      = rank_discipline(state.athletes, run_score, table)

    leaderboard = build_leaderboard(
        state.athletes,
        {r.athlete_id: r.points for r in strength},
        {r.athlete_id: r.points for r in run},
    )
    return EventResults(
        strength=strength,
        run=run,
        leaderboard=leaderboard,
        points_table=active_points_table(table, len(state.athletes)),
    )


# ─────────────────────────── Formatting helpers ──────────────────────────────

def format_points(points: float) -> str:
    """25.0 → "25", 21.5 → "21.5"."""
    return f"{points:g}"


def format_athlete_line(athlete: Athlete) -> str:
    """
    Human-readable entry summary for logs and notifications.
    Example: "Alex — 85 kg, S+B+D = 500 kg, 5k 22:30"
    """
    parts = []
    if athlete.bodyweight is not None:
        parts.append(f"{athlete.bodyweight:g} kg")
    parts.append(f"S+B+D = {athlete_total(athlete):g} kg")
    if clock_seconds(athlete.run_time) is not None:
        parts.append(f"5k {athlete.run_time}")
    return f"{athlete.name or '—'} — " + ", ".join(parts)


def format_leaderboard(state: EventState, results: Optional[EventResults] = None) -> List[str]:
    """
    Plain-text leaderboard: the points preset, a column header, then one
    line per athlete in leaderboard order.
    """
    results = results or score_event(state)
    preset = PointsPreset.LABELS.get(state.points_preset, state.points_preset)
    lines = [
        f"Points: {preset}",
        f"{'#':>3} {'Athlete':<24} {Discipline.LABELS[Discipline.STRENGTH]:<16} "
        f"{Discipline.LABELS[Discipline.RUN]:<6} Total",
    ]
    for place, row in enumerate(results.leaderboard, start=1):
        lines.append(
            f"{place:>2}. {row.name:<24} {format_points(row.strength_points):<16} "
            f"{format_points(row.run_points):<6} {format_points(row.total)}"
        )
    return lines
