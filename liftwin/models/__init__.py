from liftwin.models.base import Base, engine, AsyncSessionFactory, create_tables
from liftwin.models.models import (
    KeyValue,
    Sex,
    PointsPreset,
    Discipline,
    Theme,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionFactory",
    "create_tables",
    "KeyValue",
    "Sex",
    "PointsPreset",
    "Discipline",
    "Theme",
]
