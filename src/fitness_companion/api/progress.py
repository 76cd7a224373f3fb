"""Progress tracking endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from fitness_companion.api.schemas import (
    PhotoIn,
    PhotoUpdate,
    WeightIn,
    WeightUpdate,
    WorkoutIn,
    WorkoutUpdate,
)

if TYPE_CHECKING:
    from fitness_companion.containers import AppContainer

router = APIRouter(prefix="/progress", tags=["progress"])


def _not_found(what: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found"
    )


@router.post("/weights", status_code=status.HTTP_201_CREATED)
async def add_weight(payload: WeightIn, request: Request) -> dict[str, str]:
    """Record a weigh-in."""
    container: AppContainer = request.app.state.container
    entry_id = container.progress.add_weight_entry(
        payload.date, payload.weight, payload.notes
    )
    return {"id": entry_id}


@router.get("/weights")
async def list_weights(
    start: datetime, end: datetime, request: Request
) -> dict[str, object]:
    """Weigh-ins within an inclusive range, oldest first."""
    container: AppContainer = request.app.state.container
    return {
        "entries": container.progress.get_weight_entries_by_date_range(start, end)
    }


@router.get("/weights/latest")
async def latest_weight(request: Request) -> dict[str, float | None]:
    """Weight of the most recent weigh-in."""
    container: AppContainer = request.app.state.container
    return {"weight": container.progress.get_latest_weight()}


@router.get("/weights/trend")
async def weight_trend(request: Request, days: int = 30) -> dict[str, object]:
    """Daily average weight over the trailing window."""
    container: AppContainer = request.app.state.container
    return {"points": container.progress.get_weight_trend(days)}


@router.patch("/weights/{entry_id}")
async def update_weight(
    entry_id: str, payload: WeightUpdate, request: Request
) -> dict[str, str]:
    """Edit a weigh-in."""
    container: AppContainer = request.app.state.container
    if not container.progress.update_weight_entry(entry_id, **payload.changes()):
        raise _not_found("Weight entry")
    return {"status": "ok"}


@router.delete("/weights/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_weight(entry_id: str, request: Request) -> None:
    """Remove a weigh-in."""
    container: AppContainer = request.app.state.container
    if not container.progress.delete_weight_entry(entry_id):
        raise _not_found("Weight entry")


@router.post("/photos", status_code=status.HTTP_201_CREATED)
async def add_photo(payload: PhotoIn, request: Request) -> dict[str, str]:
    """Store a progress photo reference."""
    container: AppContainer = request.app.state.container
    photo_id = container.progress.add_photo(
        payload.date,
        payload.image_uri,
        weight=payload.weight,
        notes=payload.notes,
        body_measurements=payload.body_measurements,
    )
    return {"id": photo_id}


@router.get("/photos")
async def list_photos(
    start: datetime, end: datetime, request: Request
) -> dict[str, object]:
    """Photos within an inclusive range, newest first."""
    container: AppContainer = request.app.state.container
    return {"photos": container.progress.get_photos_by_date_range(start, end)}


@router.patch("/photos/{photo_id}")
async def update_photo(
    photo_id: str, payload: PhotoUpdate, request: Request
) -> dict[str, str]:
    """Edit a progress photo."""
    container: AppContainer = request.app.state.container
    if not container.progress.update_photo(photo_id, **payload.changes()):
        raise _not_found("Photo")
    return {"status": "ok"}


@router.delete("/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(photo_id: str, request: Request) -> None:
    """Remove a progress photo."""
    container: AppContainer = request.app.state.container
    if not container.progress.delete_photo(photo_id):
        raise _not_found("Photo")


@router.post("/workouts", status_code=status.HTTP_201_CREATED)
async def add_workout(payload: WorkoutIn, request: Request) -> dict[str, str]:
    """Record a workout."""
    container: AppContainer = request.app.state.container
    workout_id = container.progress.add_workout(
        payload.date,
        payload.type,
        payload.name,
        payload.duration,
        calories_burned=payload.calories_burned,
        notes=payload.notes,
        exercises=payload.exercises,
    )
    return {"id": workout_id}


@router.get("/workouts")
async def list_workouts(
    start: datetime, end: datetime, request: Request
) -> dict[str, object]:
    """Workouts within an inclusive range, newest first."""
    container: AppContainer = request.app.state.container
    return {"workouts": container.progress.get_workouts_by_date_range(start, end)}


@router.patch("/workouts/{workout_id}")
async def update_workout(
    workout_id: str, payload: WorkoutUpdate, request: Request
) -> dict[str, str]:
    """Edit a workout."""
    container: AppContainer = request.app.state.container
    if not container.progress.update_workout(workout_id, **payload.changes()):
        raise _not_found("Workout")
    return {"status": "ok"}


@router.delete("/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(workout_id: str, request: Request) -> None:
    """Remove a workout."""
    container: AppContainer = request.app.state.container
    if not container.progress.delete_workout(workout_id):
        raise _not_found("Workout")
