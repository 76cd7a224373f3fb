"""Progress tracking: weigh-ins, progress photos and workouts."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import TypeVar
from uuid import uuid4
from zoneinfo import ZoneInfo

from fitness_companion.domain.days import day_key, to_local
from fitness_companion.domain.nutrition import round_half_up
from fitness_companion.domain.progress import (
    BodyMeasurements,
    Exercise,
    ProgressPhoto,
    WeightEntry,
    WeightTrendPoint,
    WorkoutSession,
    WorkoutType,
)
from fitness_companion.services.key_value import JsonDocument, KeyValueStore

WEIGHT_ENTRIES_KEY = "progress.weight_entries"
PHOTOS_KEY = "progress.photos"
WORKOUTS_KEY = "progress.workouts"

_Record = TypeVar("_Record", WeightEntry, ProgressPhoto, WorkoutSession)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ProgressService:
    """Append-only progress collections with date-range queries.

    Range bounds are inclusive. Weigh-ins come back oldest first, photos and
    workouts newest first.
    """

    store: KeyValueStore
    timezone_name: str = "UTC"
    clock: Callable[[], datetime] = _utcnow
    _weights: JsonDocument[tuple[WeightEntry, ...]] = field(init=False, repr=False)
    _photos: JsonDocument[tuple[ProgressPhoto, ...]] = field(init=False, repr=False)
    _workouts: JsonDocument[tuple[WorkoutSession, ...]] = field(
        init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._weights = JsonDocument(
            self.store, WEIGHT_ENTRIES_KEY, tuple[WeightEntry, ...], ()
        )
        self._photos = JsonDocument(
            self.store, PHOTOS_KEY, tuple[ProgressPhoto, ...], ()
        )
        self._workouts = JsonDocument(
            self.store, WORKOUTS_KEY, tuple[WorkoutSession, ...], ()
        )

    @property
    def tz(self) -> ZoneInfo:
        """Timezone that defines calendar days and naive timestamps."""
        return ZoneInfo(self.timezone_name)

    def add_weight_entry(
        self, date: datetime, weight: float, notes: str | None = None
    ) -> str:
        """Record a weigh-in in kilograms."""
        entry = WeightEntry(
            id=f"weight_{uuid4().hex}",
            date=to_local(date, self.tz),
            weight=weight,
            notes=notes,
        )
        self._weights.save((*self._weights.load(), entry))
        return entry.id

    def update_weight_entry(self, entry_id: str, **changes: object) -> bool:
        """Edit a weigh-in."""
        return _update(self._weights, entry_id, changes, self.tz)

    def delete_weight_entry(self, entry_id: str) -> bool:
        """Remove a weigh-in."""
        return _delete(self._weights, entry_id)

    def get_weight_entries_by_date_range(
        self, start: datetime, end: datetime
    ) -> list[WeightEntry]:
        """Weigh-ins within the range, oldest first."""
        start, end = to_local(start, self.tz), to_local(end, self.tz)
        entries = [
            entry for entry in self._weights.load() if start <= entry.date <= end
        ]
        return sorted(entries, key=lambda entry: entry.date)

    def get_latest_weight(self) -> float | None:
        """Weight of the most recent weigh-in."""
        entries = self._weights.load()
        if not entries:
            return None
        return max(entries, key=lambda entry: entry.date).weight

    def get_weight_trend(
        self, days: int, now: datetime | None = None
    ) -> list[WeightTrendPoint]:
        """One averaged point per calendar day over the trailing window."""
        end = to_local(now or self.clock(), self.tz)
        entries = self.get_weight_entries_by_date_range(end - timedelta(days=days), end)
        buckets: dict[str, list[WeightEntry]] = {}
        for entry in entries:
            buckets.setdefault(day_key(entry.date, self.tz), []).append(entry)
        points = [
            WeightTrendPoint(
                date=bucket[0].date,
                weight=round_half_up(
                    sum(entry.weight for entry in bucket) / len(bucket), 1
                ),
            )
            for bucket in buckets.values()
        ]
        return sorted(points, key=lambda point: point.date)

    def add_photo(  # noqa: PLR0913
        self,
        date: datetime,
        image_uri: str,
        weight: float | None = None,
        notes: str | None = None,
        body_measurements: BodyMeasurements | None = None,
    ) -> str:
        """Store a progress photo reference."""
        photo = ProgressPhoto(
            id=f"photo_{uuid4().hex}",
            date=to_local(date, self.tz),
            image_uri=image_uri,
            weight=weight,
            notes=notes,
            body_measurements=body_measurements,
        )
        self._photos.save((*self._photos.load(), photo))
        return photo.id

    def update_photo(self, photo_id: str, **changes: object) -> bool:
        """Edit a progress photo."""
        return _update(self._photos, photo_id, changes, self.tz)

    def delete_photo(self, photo_id: str) -> bool:
        """Remove a progress photo."""
        return _delete(self._photos, photo_id)

    def get_photos_by_date_range(
        self, start: datetime, end: datetime
    ) -> list[ProgressPhoto]:
        """Photos within the range, newest first."""
        start, end = to_local(start, self.tz), to_local(end, self.tz)
        photos = [photo for photo in self._photos.load() if start <= photo.date <= end]
        return sorted(photos, key=lambda photo: photo.date, reverse=True)

    def add_workout(  # noqa: PLR0913
        self,
        date: datetime,
        workout_type: WorkoutType,
        name: str,
        duration: float,
        calories_burned: float | None = None,
        notes: str | None = None,
        exercises: tuple[Exercise, ...] | None = None,
    ) -> str:
        """Record a completed workout."""
        workout = WorkoutSession(
            id=f"workout_{uuid4().hex}",
            date=to_local(date, self.tz),
            type=workout_type,
            name=name,
            duration=duration,
            calories_burned=calories_burned,
            notes=notes,
            exercises=exercises,
        )
        self._workouts.save((*self._workouts.load(), workout))
        return workout.id

    def update_workout(self, workout_id: str, **changes: object) -> bool:
        """Edit a workout."""
        return _update(self._workouts, workout_id, changes, self.tz)

    def delete_workout(self, workout_id: str) -> bool:
        """Remove a workout."""
        return _delete(self._workouts, workout_id)

    def get_workouts_by_date_range(
        self, start: datetime, end: datetime
    ) -> list[WorkoutSession]:
        """Workouts within the range, newest first."""
        start, end = to_local(start, self.tz), to_local(end, self.tz)
        workouts = [
            workout for workout in self._workouts.load() if start <= workout.date <= end
        ]
        return sorted(workouts, key=lambda workout: workout.date, reverse=True)

    def clear_all_data(self) -> None:
        """Forget all progress data."""
        self._weights.clear()
        self._photos.clear()
        self._workouts.clear()


def _update(
    document: JsonDocument[tuple[_Record, ...]],
    record_id: str,
    changes: dict[str, object],
    tz: ZoneInfo,
) -> bool:
    if "id" in changes:
        raise TypeError("Record id cannot be changed")
    date = changes.get("date")
    if isinstance(date, datetime):
        changes = {**changes, "date": to_local(date, tz)}
    records = list(document.load())
    for index, record in enumerate(records):
        if record.id == record_id:
            records[index] = replace(record, **changes)  # type: ignore[arg-type]
            document.save(tuple(records))
            return True
    return False


def _delete(document: JsonDocument[tuple[_Record, ...]], record_id: str) -> bool:
    records = document.load()
    remaining = tuple(record for record in records if record.id != record_id)
    if len(remaining) == len(records):
        return False
    document.save(remaining)
    return True
