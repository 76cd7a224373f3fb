"""User profile and goal endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from fitness_companion.api.schemas import (
    AnthropometryUpdate,
    AvatarIn,
    NutritionGoalsUpdate,
    PreferencesUpdate,
    ProfileIn,
)
from fitness_companion.domain.users import FitnessGoal

if TYPE_CHECKING:
    from fitness_companion.containers import AppContainer

router = APIRouter(prefix="/profile", tags=["profile"])


def _no_profile() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No profile")


@router.get("")
async def get_profile(request: Request) -> dict[str, object]:
    """Return the profile."""
    container: AppContainer = request.app.state.container
    user = container.users.get_user()
    if user is None:
        raise _no_profile()
    return {"user": user}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_profile(payload: ProfileIn, request: Request) -> dict[str, object]:
    """Create the profile with default measurements and goals."""
    container: AppContainer = request.app.state.container
    if container.users.is_initialized:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Profile already exists"
        )
    return {"user": container.users.initialize_user(payload.name)}


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def reset_profile(request: Request) -> None:
    """Delete the profile."""
    container: AppContainer = request.app.state.container
    container.users.reset_user()


@router.patch("/anthropometry")
async def update_anthropometry(
    payload: AnthropometryUpdate, request: Request
) -> dict[str, object]:
    """Update measurements; nutrition goals are recalculated."""
    container: AppContainer = request.app.state.container
    if not container.users.update_anthropometry(**payload.changes()):
        raise _no_profile()
    return {"user": container.users.get_user()}


@router.patch("/goals")
async def update_goals(
    payload: NutritionGoalsUpdate, request: Request
) -> dict[str, object]:
    """Override nutrition targets."""
    container: AppContainer = request.app.state.container
    if not container.users.update_nutrition_goals(**payload.changes()):
        raise _no_profile()
    return {"user": container.users.get_user()}


@router.patch("/preferences")
async def update_preferences(
    payload: PreferencesUpdate, request: Request
) -> dict[str, object]:
    """Update preferences; a new fitness goal recalculates targets."""
    container: AppContainer = request.app.state.container
    if not container.users.update_preferences(**payload.changes()):
        raise _no_profile()
    return {"user": container.users.get_user()}


@router.put("/avatar")
async def set_avatar(payload: AvatarIn, request: Request) -> dict[str, object]:
    """Set the avatar image reference."""
    container: AppContainer = request.app.state.container
    if not container.users.set_avatar(payload.uri):
        raise _no_profile()
    return {"user": container.users.get_user()}


@router.get("/metrics")
async def metrics(request: Request) -> dict[str, float]:
    """Energy expenditure of the current profile."""
    container: AppContainer = request.app.state.container
    return {
        "bmr": container.users.calculate_bmr(),
        "tdee": container.users.calculate_tdee(),
    }


@router.get("/goals/{fitness_goal}")
async def preview_goals(
    fitness_goal: FitnessGoal, request: Request
) -> dict[str, object]:
    """Targets the profile would get for a fitness goal, without saving them."""
    container: AppContainer = request.app.state.container
    return {"goals": container.users.calculate_nutrition_goals(fitness_goal)}
