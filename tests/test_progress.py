"""Tests for progress tracking."""

from datetime import UTC, datetime

import pytest

from fitness_companion.domain.progress import BodyMeasurements, Exercise, WorkoutType
from fitness_companion.services.progress import ProgressService


def _at(day: int, hour: int = 9) -> datetime:
    return datetime(2024, 5, day, hour, 0, tzinfo=UTC)


def test_weight_range_is_inclusive_and_ascending(progress: ProgressService) -> None:
    progress.add_weight_entry(_at(12), 79.8)
    progress.add_weight_entry(_at(10), 80.5)
    progress.add_weight_entry(_at(14), 79.5)
    progress.add_weight_entry(_at(1), 82.0)

    entries = progress.get_weight_entries_by_date_range(_at(10), _at(14))

    assert [entry.weight for entry in entries] == [80.5, 79.8, 79.5]


def test_latest_weight(progress: ProgressService) -> None:
    assert progress.get_latest_weight() is None

    progress.add_weight_entry(_at(12), 79.8)
    progress.add_weight_entry(_at(10), 80.5)

    assert progress.get_latest_weight() == 79.8


def test_weight_trend_averages_per_day(progress: ProgressService) -> None:
    progress.add_weight_entry(_at(10, 8), 80.0)
    progress.add_weight_entry(_at(10, 20), 80.5)
    progress.add_weight_entry(_at(12), 79.8)
    progress.add_weight_entry(_at(1), 85.0)

    trend = progress.get_weight_trend(7)

    assert [point.weight for point in trend] == [80.3, 79.8]
    assert trend[0].date == _at(10, 8)


def test_update_and_delete_weight_entry(progress: ProgressService) -> None:
    entry_id = progress.add_weight_entry(_at(10), 80.5, notes="morning")

    assert progress.update_weight_entry(entry_id, weight=80.1)
    assert progress.get_latest_weight() == 80.1
    assert progress.delete_weight_entry(entry_id)
    assert not progress.delete_weight_entry(entry_id)
    assert not progress.update_weight_entry(entry_id, weight=70)


def test_update_rejects_id_change(progress: ProgressService) -> None:
    entry_id = progress.add_weight_entry(_at(10), 80.5)

    with pytest.raises(TypeError):
        progress.update_weight_entry(entry_id, id="weight_other")


def test_photos_are_returned_newest_first(progress: ProgressService) -> None:
    progress.add_photo(_at(10), "file:///front.jpg", weight=80.5)
    progress.add_photo(
        _at(12),
        "file:///side.jpg",
        body_measurements=BodyMeasurements(waist=84, hips=98),
    )

    photos = progress.get_photos_by_date_range(_at(1), _at(31))

    assert [photo.image_uri for photo in photos] == [
        "file:///side.jpg",
        "file:///front.jpg",
    ]
    assert photos[0].body_measurements == BodyMeasurements(waist=84, hips=98)


def test_update_photo_normalises_date(progress: ProgressService) -> None:
    photo_id = progress.add_photo(_at(10), "file:///front.jpg")

    assert progress.update_photo(photo_id, date=datetime(2024, 5, 20, 9, 0))

    assert progress.get_photos_by_date_range(_at(10), _at(11)) == []
    assert len(progress.get_photos_by_date_range(_at(20, 0), _at(20, 23))) == 1
    assert progress.delete_photo(photo_id)


def test_workouts(progress: ProgressService) -> None:
    progress.add_workout(_at(10), WorkoutType.CARDIO, "Run", 30, calories_burned=320)
    workout_id = progress.add_workout(
        _at(12),
        WorkoutType.STRENGTH,
        "Upper body",
        45,
        exercises=(Exercise(name="Bench press", sets=3, reps=8, weight=60),),
    )

    workouts = progress.get_workouts_by_date_range(_at(1), _at(31))

    assert [workout.name for workout in workouts] == ["Upper body", "Run"]
    assert workouts[0].exercises is not None
    assert workouts[0].exercises[0].reps == 8
    assert progress.update_workout(workout_id, duration=50)
    assert progress.get_workouts_by_date_range(_at(12), _at(12))[0].duration == 50
    assert progress.delete_workout(workout_id)


def test_clear_all_data(progress: ProgressService) -> None:
    progress.add_weight_entry(_at(10), 80.5)
    progress.add_photo(_at(10), "file:///front.jpg")
    progress.add_workout(_at(10), WorkoutType.CARDIO, "Run", 30)

    progress.clear_all_data()

    assert progress.get_latest_weight() is None
    assert progress.get_photos_by_date_range(_at(1), _at(31)) == []
    assert progress.get_workouts_by_date_range(_at(1), _at(31)) == []
