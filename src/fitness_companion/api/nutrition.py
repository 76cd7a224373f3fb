"""Nutrition ledger and food catalog endpoints."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from fitness_companion.api.schemas import (
    FoodIn,
    FoodInMealUpdate,
    FoodPortion,
    FoodUpdate,
    MacrosIn,
    MealIn,
    MealUpdate,
    WaterIn,
)
from fitness_companion.domain.nutrition import (
    FoodItem,
    MacroNutrients,
    MealType,
    NewMeal,
    consume,
)
from fitness_companion.services.food_catalog import NewFood
from fitness_companion.services.users import DEFAULT_NUTRITION_GOALS

if TYPE_CHECKING:
    from fitness_companion.containers import AppContainer

router = APIRouter(tags=["nutrition"])


def _day(day: date) -> datetime:
    """Local midnight of a calendar date; naive, so the ledger timezone applies."""
    return datetime.combine(day, time.min)


def _macros(macros: MacrosIn) -> MacroNutrients:
    return MacroNutrients(**macros.model_dump())


def _not_found(what: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found"
    )


def _resolve_food(container: AppContainer, portion: FoodPortion) -> FoodItem:
    if portion.food_item is not None:
        return portion.food_item
    if portion.food_id is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Either food_id or food_item is required",
        )
    food = container.food_catalog.get_food(portion.food_id)
    if food is None:
        raise _not_found("Food")
    return food


@router.post("/nutrition/meals", status_code=status.HTTP_201_CREATED)
async def add_meal(payload: MealIn, request: Request) -> dict[str, object]:
    """Log a meal with its foods."""
    container: AppContainer = request.app.state.container
    foods = tuple(
        consume(_resolve_food(container, portion), portion.amount)
        for portion in payload.foods
    )
    meal_id = container.ledger.add_meal(
        NewMeal(
            type=payload.type,
            name=payload.name,
            date=payload.date,
            time=payload.time or payload.date,
            foods=foods,
            notes=payload.notes,
            image_uri=payload.image_uri,
        )
    )
    return {"meal": container.ledger.get_meal(meal_id)}


@router.get("/nutrition/meals/{meal_id}")
async def get_meal(meal_id: str, request: Request) -> dict[str, object]:
    """Return one meal."""
    container: AppContainer = request.app.state.container
    meal = container.ledger.get_meal(meal_id)
    if meal is None:
        raise _not_found("Meal")
    return {"meal": meal}


@router.patch("/nutrition/meals/{meal_id}")
async def update_meal(
    meal_id: str, payload: MealUpdate, request: Request
) -> dict[str, object]:
    """Edit meal details."""
    container: AppContainer = request.app.state.container
    if not container.ledger.update_meal(meal_id, **payload.changes()):
        raise _not_found("Meal")
    return {"meal": container.ledger.get_meal(meal_id)}


@router.delete("/nutrition/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal(meal_id: str, request: Request) -> None:
    """Delete a meal."""
    container: AppContainer = request.app.state.container
    if not container.ledger.delete_meal(meal_id):
        raise _not_found("Meal")


@router.post("/nutrition/meals/{meal_id}/foods")
async def add_food_to_meal(
    meal_id: str, payload: FoodPortion, request: Request
) -> dict[str, object]:
    """Append a food to a meal."""
    container: AppContainer = request.app.state.container
    food = _resolve_food(container, payload)
    if not container.ledger.add_food_to_meal(meal_id, food, payload.amount):
        raise _not_found("Meal")
    return {"meal": container.ledger.get_meal(meal_id)}


@router.patch("/nutrition/meals/{meal_id}/foods/{food_index}")
async def update_food_in_meal(
    meal_id: str, food_index: int, payload: FoodInMealUpdate, request: Request
) -> dict[str, object]:
    """Change the amount or food of one meal entry."""
    container: AppContainer = request.app.state.container
    updated = container.ledger.update_food_in_meal(
        meal_id, food_index, amount=payload.amount, food_item=payload.food_item
    )
    if not updated:
        raise _not_found("Meal food")
    return {"meal": container.ledger.get_meal(meal_id)}


@router.delete("/nutrition/meals/{meal_id}/foods/{food_index}")
async def remove_food_from_meal(
    meal_id: str, food_index: int, request: Request
) -> dict[str, object]:
    """Remove one food; the meal disappears with its last food."""
    container: AppContainer = request.app.state.container
    if not container.ledger.remove_food_from_meal(meal_id, food_index):
        raise _not_found("Meal food")
    return {"meal": container.ledger.get_meal(meal_id)}


@router.get("/nutrition/days")
async def list_days(start: date, end: date, request: Request) -> dict[str, object]:
    """Logged days within an inclusive date range."""
    container: AppContainer = request.app.state.container
    return {"days": container.ledger.list_daily_entries(_day(start), _day(end))}


@router.get("/nutrition/days/{day}")
async def get_day(day: date, request: Request) -> dict[str, object]:
    """Meals and totals of one day."""
    container: AppContainer = request.app.state.container
    return {
        "day": container.ledger.get_daily_nutrition(_day(day)),
        "totals": container.ledger.calculate_total_nutrition(_day(day)),
    }


@router.get("/nutrition/days/{day}/meals")
async def get_meals_by_type(
    day: date, meal_type: MealType, request: Request
) -> dict[str, object]:
    """Meals of one type on a day."""
    container: AppContainer = request.app.state.container
    return {"meals": container.ledger.get_meals_by_type(_day(day), meal_type)}


@router.get("/nutrition/days/{day}/remaining")
async def get_remaining(day: date, request: Request) -> dict[str, object]:
    """What is left of the profile's daily targets."""
    container: AppContainer = request.app.state.container
    user = container.users.get_user()
    goals = user.nutrition_goals if user else DEFAULT_NUTRITION_GOALS
    remaining = container.ledger.calculate_remaining_nutrition(
        _day(day),
        goals.calories,
        MacroNutrients(protein=goals.protein, carbs=goals.carbs, fat=goals.fat),
    )
    return {"remaining": remaining}


@router.put("/nutrition/days/{day}/water")
async def set_water(
    day: date, payload: WaterIn, request: Request
) -> dict[str, object]:
    """Record water intake on a logged day."""
    container: AppContainer = request.app.state.container
    if not container.ledger.set_water_intake(_day(day), payload.milliliters):
        raise _not_found("Day")
    return {"day": container.ledger.get_daily_nutrition(_day(day))}


@router.post("/foods", status_code=status.HTTP_201_CREATED)
async def add_food(payload: FoodIn, request: Request) -> dict[str, object]:
    """Add a food to the catalog."""
    container: AppContainer = request.app.state.container
    food_id = container.food_catalog.add_food(
        NewFood(
            name=payload.name,
            calories=payload.calories,
            macros=_macros(payload.macros),
            serving_size=payload.serving_size,
            serving_unit=payload.serving_unit,
            is_per_serving=payload.is_per_serving,
            image_uri=payload.image_uri,
        )
    )
    return {"food": container.food_catalog.get_food(food_id)}


@router.get("/foods")
async def search_foods(
    request: Request, query: str = "", limit: int = 10
) -> dict[str, object]:
    """Search the catalog by name; an empty query lists everything."""
    container: AppContainer = request.app.state.container
    if not query:
        return {"foods": container.food_catalog.list_foods()}
    return {"foods": container.food_catalog.search(query, limit=limit)}


@router.get("/foods/{food_id}")
async def get_food(food_id: str, request: Request) -> dict[str, object]:
    """Return a catalog food."""
    container: AppContainer = request.app.state.container
    food = container.food_catalog.get_food(food_id)
    if food is None:
        raise _not_found("Food")
    return {"food": food}


@router.patch("/foods/{food_id}")
async def update_food(
    food_id: str, payload: FoodUpdate, request: Request
) -> dict[str, object]:
    """Edit a catalog food; already logged meals keep their copy."""
    container: AppContainer = request.app.state.container
    changes = payload.changes()
    if payload.macros is not None:
        changes["macros"] = _macros(payload.macros)
    if not container.food_catalog.update_food(food_id, **changes):
        raise _not_found("Food")
    return {"food": container.food_catalog.get_food(food_id)}


@router.delete("/foods/{food_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food(food_id: str, request: Request) -> None:
    """Remove a catalog food."""
    container: AppContainer = request.app.state.container
    if not container.food_catalog.delete_food(food_id):
        raise _not_found("Food")
