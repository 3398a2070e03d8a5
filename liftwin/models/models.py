"""
Persistence model and domain constants for Liftwin.

Domain overview
---------------
Event      — one Monthly Meet, addressed by an opaque event id (UUID4)
  └─ Athlete — roster entry with three lifts and a 5k run time

Events are not mapped to relational tables. Every event snapshot, the event
index and the user preferences live as serialized values in a single
string-keyed table, so the same layout works for any key-value backend.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from liftwin.models.base import Base

# ─────────────────────────── Constants ────────────────────────────────────────

class Sex:
    MALE   = "M"
    FEMALE = "F"
    OTHER  = "X"   # recorded, but never scored for strength


class PointsPreset:
    F1     = "F1"       # 25-18-15-12-10-8-6-4-2-1
    SIMPLE = "Simple"   # 10-7-5-3-2-1
    CUSTOM = "Custom"   # user supplied

    TABLES: dict[str, list[float]] = {
        F1:     [25, 18, 15, 12, 10, 8, 6, 4, 2, 1],
        SIMPLE: [10, 7, 5, 3, 2, 1],
    }

    LABELS = {
        F1:     "F1 (25-18-15-…)",
        SIMPLE: "Simple (10-7-5-…)",
        CUSTOM: "Custom",
    }


class Discipline:
    STRENGTH = "strength"
    RUN      = "run"

    LIFTS = ("squat", "bench", "deadlift")

    LABELS = {
        STRENGTH: "Strength (DOTS)",
        RUN:      "5k",
    }


class Theme:
    LIGHT = "light"
    DARK  = "dark"

    ALL = (LIGHT, DARK)


# ─────────────────────────── Models ───────────────────────────────────────────

class KeyValue(Base):
    """A single serialized value in the local store."""
    __tablename__ = "kv_store"

    key:        Mapped[str]      = mapped_column(String(255), primary_key=True)
    value:      Mapped[str]      = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<KeyValue {self.key!r} ({len(self.value)} chars)>"
