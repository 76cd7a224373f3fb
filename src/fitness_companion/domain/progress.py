"""Domain models for progress tracking."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True)
class WeightEntry:
    """A weigh-in in kilograms."""

    id: str
    date: datetime
    weight: float
    notes: str | None = None


@dataclass(frozen=True)
class BodyMeasurements:
    """Circumferences in cm taken with a progress photo."""

    waist: float | None = None
    hips: float | None = None
    chest: float | None = None
    arms: float | None = None
    thighs: float | None = None


@dataclass(frozen=True)
class ProgressPhoto:
    """A progress photo with optional measurements."""

    id: str
    date: datetime
    image_uri: str
    weight: float | None = None
    notes: str | None = None
    body_measurements: BodyMeasurements | None = None


class WorkoutType(StrEnum):
    """Category of a workout."""

    STRENGTH = "strength"
    CARDIO = "cardio"
    FLEXIBILITY = "flexibility"
    BALANCE = "balance"
    SPORT = "sport"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Exercise:
    """One exercise within a workout; distance in km, duration in minutes."""

    name: str
    sets: int | None = None
    reps: int | None = None
    weight: float | None = None
    duration: float | None = None
    distance: float | None = None


@dataclass(frozen=True)
class WorkoutSession:
    """A completed workout; duration in minutes."""

    id: str
    date: datetime
    type: WorkoutType
    name: str
    duration: float
    calories_burned: float | None = None
    notes: str | None = None
    exercises: tuple[Exercise, ...] | None = None


@dataclass(frozen=True)
class WeightTrendPoint:
    """Average weight of one calendar day."""

    date: datetime
    weight: float
