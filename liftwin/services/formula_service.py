"""
Score formulas for the two Monthly Meet disciplines.

  - Strength : DOTS-style bodyweight normalization of the S+B+D total
  - 5k run   : neutral time index anchored at 13:00

Both return None for "unscored" so that a real 0.0 is never confused with
a missing result. Higher is better for both, which lets one ranking routine
serve every discipline.
"""
from __future__ import annotations

import math
from typing import Optional

from liftwin.models.models import Discipline, Sex
from liftwin.schemas import Athlete
from liftwin.validators import clock_seconds

# ─────────────────────────── DOTS ────────────────────────────────────────────

# Degree-5 polynomial in bodyweight: A + B·x + C·x² + D·x³ + E·x⁴ + F·x⁵
DOTS_COEFFICIENTS: dict[str, tuple[float, float, float, float, float, float]] = {
    Sex.MALE: (
        47.46178854,
        8.472061379,
        0.07369410346,
        -0.001395833811,
        0.00000707665973070743,
        -0.0000000120804336482315,
    ),
    Sex.FEMALE: (
        -125.4255398,
        13.71219419,
        -0.03307250631,
        -0.001050400051,
        0.00000938773881462799,
        -0.000000023334613884954,
    ),
}

DOTS_NUMERATOR = 600.0


def dots_denominator(bodyweight: float, sex: str) -> Optional[float]:
    """Evaluate the sex-specific DOTS polynomial, None for unscored sexes."""
    coeffs = DOTS_COEFFICIENTS.get(sex)
    if coeffs is None:
        return None
    a, b, c, d, e, f = coeffs
    x = bodyweight
    return a + b*x + c*x**2 + d*x**3 + e*x**4 + f*x**5


def dots(total: Optional[float], bodyweight: Optional[float], sex: str) -> Optional[float]:
    """
    DOTS strength score: 600 / P(bodyweight) × total.

    Returns None (unscored) unless total > 0, bodyweight > 0 and sex is M or F,
    or when the polynomial is zero / not finite.
    """
    if total is None or bodyweight is None:
        return None
    if total <= 0 or bodyweight <= 0:
        return None
    try:
        denom = dots_denominator(bodyweight, sex)
    except OverflowError:
        return None
    if denom is None or not math.isfinite(denom) or denom == 0:
        return None
    score = (DOTS_NUMERATOR / denom) * total
    return score if math.isfinite(score) else None


def athlete_total(athlete: Athlete) -> float:
    """Sum of the three lifts; lifts not entered count as 0."""
    return sum(getattr(athlete, lift) or 0.0 for lift in Discipline.LIFTS)


def strength_score(athlete: Athlete) -> Optional[float]:
    return dots(athlete_total(athlete), athlete.bodyweight, athlete.sex)


# ─────────────────────────── 5k run ──────────────────────────────────────────

# 13:00 maps to an index of exactly 1.0
RUN_ANCHOR_SECONDS = 780.0


def run_index(seconds: Optional[float]) -> Optional[float]:
    """Run index = 780 / seconds. Faster is higher; None unless seconds > 0."""
    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return None
    return RUN_ANCHOR_SECONDS / seconds


def run_score(athlete: Athlete) -> Optional[float]:
    return run_index(clock_seconds(athlete.run_time))
