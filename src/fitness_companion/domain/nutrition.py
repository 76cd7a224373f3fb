"""Nutrition domain models."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class MealType(StrEnum):
    """Slot of the day a meal belongs to."""

    BREAKFAST = "breakfast"
    MORNING_SNACK = "morningSnack"
    LUNCH = "lunch"
    AFTERNOON_SNACK = "afternoonSnack"
    DINNER = "dinner"
    EVENING_SNACK = "eveningSnack"
    CUSTOM = "custom"


class ServingUnit(StrEnum):
    """Unit a food's serving size is expressed in."""

    GRAM = "g"
    MILLILITER = "ml"
    OUNCE = "oz"
    TABLESPOON = "tbsp"
    TEASPOON = "tsp"
    CUP = "cup"
    PIECE = "piece"
    CUSTOM = "custom"


@dataclass(frozen=True)
class MacroNutrients:
    """Macronutrients in grams."""

    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float | None = None
    sugar: float | None = None


ZERO_MACROS = MacroNutrients(fiber=0.0, sugar=0.0)


@dataclass(frozen=True)
class FoodItem:
    """Catalog entry with nutrition per serving or per 100 units."""

    id: str
    name: str
    calories: float
    macros: MacroNutrients
    serving_size: float
    serving_unit: ServingUnit = ServingUnit.GRAM
    is_per_serving: bool = False
    image_uri: str | None = None


@dataclass(frozen=True)
class ConsumedFood:
    """A food eaten in some amount, with totals frozen at logging time."""

    food_item: FoodItem
    amount: float
    total_calories: float
    total_macros: MacroNutrients


@dataclass(frozen=True)
class Meal:
    """A meal with totals that always equal the sum of its foods."""

    id: str
    type: MealType
    name: str
    date: datetime
    time: datetime
    foods: tuple[ConsumedFood, ...] = ()
    total_calories: float = 0.0
    total_macros: MacroNutrients = ZERO_MACROS
    notes: str | None = None
    image_uri: str | None = None


@dataclass(frozen=True)
class DailyNutrition:
    """All meals of one local calendar day."""

    id: str
    date: datetime
    meals: tuple[Meal, ...] = ()
    total_calories: float = 0.0
    total_macros: MacroNutrients = ZERO_MACROS
    water_intake: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class NutritionTotals:
    """Calories and macros consumed on a day."""

    calories: float
    macros: MacroNutrients


@dataclass(frozen=True)
class NutritionPercentages:
    """Share of each target already consumed, capped at 100."""

    calories: int
    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class RemainingNutrition:
    """What is left of the daily targets."""

    calories: float
    macros: MacroNutrients
    percentages: NutritionPercentages


@dataclass(frozen=True)
class NewMeal:
    """Meal payload before it has an id or totals."""

    type: MealType
    name: str
    date: datetime
    time: datetime
    foods: tuple[ConsumedFood, ...] = ()
    notes: str | None = None
    image_uri: str | None = None


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like ``Math.round`` does instead of banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def consume(food_item: FoodItem, amount: float) -> ConsumedFood:
    """Snapshot a food item at the given amount."""
    if food_item.is_per_serving:
        multiplier = amount
    else:
        multiplier = amount / (food_item.serving_size or 100)
    base = food_item.macros
    return ConsumedFood(
        food_item=food_item,
        amount=amount,
        total_calories=round_half_up(food_item.calories * multiplier),
        total_macros=MacroNutrients(
            protein=round_half_up(base.protein * multiplier, 1),
            carbs=round_half_up(base.carbs * multiplier, 1),
            fat=round_half_up(base.fat * multiplier, 1),
            fiber=round_half_up(base.fiber * multiplier, 1) if base.fiber else None,
            sugar=round_half_up(base.sugar * multiplier, 1) if base.sugar else None,
        ),
    )


def sum_calories(foods: Sequence[ConsumedFood]) -> float:
    """Return the total calories of the given foods."""
    return sum((food.total_calories for food in foods), 0.0)


def sum_macros(foods: Sequence[ConsumedFood]) -> MacroNutrients:
    """Element-wise macro sum; missing fiber and sugar count as zero."""
    protein = carbs = fat = fiber = sugar = 0.0
    for food in foods:
        macros = food.total_macros
        protein += macros.protein
        carbs += macros.carbs
        fat += macros.fat
        fiber += macros.fiber or 0.0
        sugar += macros.sugar or 0.0
    return MacroNutrients(
        protein=protein, carbs=carbs, fat=fat, fiber=fiber, sugar=sugar
    )
