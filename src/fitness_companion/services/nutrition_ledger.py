"""Nutrition ledger: meals grouped by day with calorie and macro rollups."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

from fitness_companion.domain.days import epoch_millis, start_of_day, to_local
from fitness_companion.domain.nutrition import (
    DailyNutrition,
    FoodItem,
    MacroNutrients,
    Meal,
    MealType,
    NewMeal,
    NutritionPercentages,
    NutritionTotals,
    RemainingNutrition,
    consume,
    round_half_up,
    sum_calories,
    sum_macros,
)
from fitness_companion.services.key_value import JsonDocument, KeyValueStore

DAILY_ENTRIES_KEY = "nutrition.daily_entries"

_UPDATABLE_MEAL_FIELDS = frozenset(
    {"type", "name", "foods", "date", "time", "notes", "image_uri"}
)

_logger = logging.getLogger(__name__)


@dataclass
class NutritionLedgerService:
    """Owns daily nutrition entries.

    Every mutation loads the whole collection, rebuilds the touched meal and
    day from their foods, and writes the collection back. Mutations return
    ``False`` instead of raising when the meal or food does not exist.
    """

    store: KeyValueStore
    timezone_name: str = "UTC"
    _entries: JsonDocument[tuple[DailyNutrition, ...]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._entries = JsonDocument(
            self.store, DAILY_ENTRIES_KEY, tuple[DailyNutrition, ...], ()
        )

    @property
    def tz(self) -> ZoneInfo:
        """Timezone that defines calendar days."""
        return ZoneInfo(self.timezone_name)

    def add_meal(self, meal: NewMeal) -> str:
        """Log a meal under its local day and return the meal id."""
        meal_id = f"meal_{uuid4().hex}"
        created = _with_totals(
            Meal(
                id=meal_id,
                type=meal.type,
                name=meal.name,
                date=to_local(meal.date, self.tz),
                time=to_local(meal.time, self.tz),
                foods=tuple(meal.foods),
                notes=meal.notes,
                image_uri=meal.image_uri,
            )
        )
        entries = list(self._entries.load())
        self._file_meal(entries, created)
        self._entries.save(tuple(entries))
        _logger.info("Meal logged: meal_id=%s foods=%s", meal_id, len(created.foods))
        return meal_id

    def update_meal(self, meal_id: str, **changes: object) -> bool:
        """Apply a shallow update to a meal and refresh totals."""
        unknown = set(changes) - _UPDATABLE_MEAL_FIELDS
        if unknown:
            raise TypeError(f"Unsupported meal fields: {', '.join(sorted(unknown))}")
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            _logger.debug("update_meal: meal %s not found", meal_id)
            return False
        day_index, meal_index = location
        current = entries[day_index].meals[meal_index]
        if "foods" in changes:
            changes["foods"] = tuple(changes["foods"])  # type: ignore[arg-type]
        for key in ("date", "time"):
            if isinstance(changes.get(key), datetime):
                changes[key] = to_local(changes[key], self.tz)  # type: ignore[arg-type]
        updated = _with_totals(replace(current, **changes))  # type: ignore[arg-type]

        moved_day = start_of_day(updated.date, self.tz) != start_of_day(
            entries[day_index].date, self.tz
        )
        if moved_day:
            _set_meal(entries, day_index, meal_index, None)
            self._file_meal(entries, updated)
        else:
            _set_meal(entries, day_index, meal_index, updated)
        self._entries.save(tuple(entries))
        return True

    def delete_meal(self, meal_id: str) -> bool:
        """Remove a meal; a day left without meals is removed too."""
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            _logger.debug("delete_meal: meal %s not found", meal_id)
            return False
        _set_meal(entries, *location, None)
        self._entries.save(tuple(entries))
        return True

    def add_food_to_meal(
        self, meal_id: str, food_item: FoodItem, amount: float
    ) -> bool:
        """Append a food to a meal at the given amount."""
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            _logger.debug("add_food_to_meal: meal %s not found", meal_id)
            return False
        day_index, meal_index = location
        meal = entries[day_index].meals[meal_index]
        foods = (*meal.foods, consume(food_item, amount))
        updated = _with_totals(replace(meal, foods=foods))
        _set_meal(entries, day_index, meal_index, updated)
        self._entries.save(tuple(entries))
        return True

    def update_food_in_meal(
        self,
        meal_id: str,
        food_index: int,
        *,
        amount: float | None = None,
        food_item: FoodItem | None = None,
    ) -> bool:
        """Change the amount or food of one entry and recompute its nutrition."""
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            _logger.debug("update_food_in_meal: meal %s not found", meal_id)
            return False
        day_index, meal_index = location
        meal = entries[day_index].meals[meal_index]
        if not 0 <= food_index < len(meal.foods):
            return False
        current = meal.foods[food_index]
        if amount is not None or food_item is not None:
            current = consume(
                food_item or current.food_item,
                current.amount if amount is None else amount,
            )
        foods = list(meal.foods)
        foods[food_index] = current
        updated = _with_totals(replace(meal, foods=tuple(foods)))
        _set_meal(entries, day_index, meal_index, updated)
        self._entries.save(tuple(entries))
        return True

    def remove_food_from_meal(self, meal_id: str, food_index: int) -> bool:
        """Remove a food; empty meals and then empty days are pruned."""
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            _logger.debug("remove_food_from_meal: meal %s not found", meal_id)
            return False
        day_index, meal_index = location
        meal = entries[day_index].meals[meal_index]
        if not 0 <= food_index < len(meal.foods):
            return False
        foods = meal.foods[:food_index] + meal.foods[food_index + 1 :]
        updated = _with_totals(replace(meal, foods=foods)) if foods else None
        _set_meal(entries, day_index, meal_index, updated)
        self._entries.save(tuple(entries))
        return True

    def get_daily_nutrition(self, date: datetime) -> DailyNutrition | None:
        """Return the entry for the local day containing ``date``."""
        entries = self._entries.load()
        index = _find_day(entries, start_of_day(date, self.tz), self.tz)
        return None if index is None else entries[index]

    def get_meal(self, meal_id: str) -> Meal | None:
        """Return a meal by id."""
        entries = list(self._entries.load())
        location = _locate_meal(entries, meal_id)
        if location is None:
            return None
        day_index, meal_index = location
        return entries[day_index].meals[meal_index]

    def get_meals_by_type(self, date: datetime, meal_type: MealType) -> list[Meal]:
        """Return the day's meals of one type in logging order."""
        entry = self.get_daily_nutrition(date)
        if entry is None:
            return []
        return [meal for meal in entry.meals if meal.type == meal_type]

    def list_daily_entries(
        self, start: datetime, end: datetime
    ) -> list[DailyNutrition]:
        """Return entries whose day falls within the inclusive range, oldest first."""
        first = start_of_day(start, self.tz)
        last = start_of_day(end, self.tz)
        days = [
            entry
            for entry in self._entries.load()
            if first <= start_of_day(entry.date, self.tz) <= last
        ]
        return sorted(days, key=lambda entry: entry.date)

    def set_water_intake(self, date: datetime, milliliters: float) -> bool:
        """Record water intake on an existing day."""
        entries = list(self._entries.load())
        index = _find_day(entries, start_of_day(date, self.tz), self.tz)
        if index is None:
            return False
        entries[index] = replace(entries[index], water_intake=milliliters)
        self._entries.save(tuple(entries))
        return True

    def calculate_total_nutrition(self, date: datetime) -> NutritionTotals:
        """Return the day's totals, or zeros when nothing was logged."""
        entry = self.get_daily_nutrition(date)
        if entry is None:
            return NutritionTotals(calories=0.0, macros=MacroNutrients())
        return NutritionTotals(calories=entry.total_calories, macros=entry.total_macros)

    def calculate_remaining_nutrition(
        self,
        date: datetime,
        target_calories: float,
        target_macros: MacroNutrients,
    ) -> RemainingNutrition:
        """Return what is left of the targets and how much of each is used.

        Remaining amounts floor at zero and percentages cap at 100. A target
        of zero or less reads as 100% once anything was eaten, else 0%.
        """
        consumed = self.calculate_total_nutrition(date)
        eaten = consumed.macros
        return RemainingNutrition(
            calories=max(0.0, target_calories - consumed.calories),
            macros=MacroNutrients(
                protein=max(0.0, target_macros.protein - eaten.protein),
                carbs=max(0.0, target_macros.carbs - eaten.carbs),
                fat=max(0.0, target_macros.fat - eaten.fat),
            ),
            percentages=NutritionPercentages(
                calories=_percentage(consumed.calories, target_calories),
                protein=_percentage(eaten.protein, target_macros.protein),
                carbs=_percentage(eaten.carbs, target_macros.carbs),
                fat=_percentage(eaten.fat, target_macros.fat),
            ),
        )

    def clear_all_data(self) -> None:
        """Forget every logged day."""
        self._entries.clear()

    def _file_meal(self, entries: list[DailyNutrition], meal: Meal) -> None:
        day = start_of_day(meal.date, self.tz)
        index = _find_day(entries, day, self.tz)
        if index is None:
            created = DailyNutrition(
                id=f"day_{epoch_millis(day)}", date=day, meals=(meal,)
            )
            entries.append(_rollup(created))
            return
        entry = entries[index]
        entries[index] = _rollup(replace(entry, meals=(*entry.meals, meal)))


def _with_totals(meal: Meal) -> Meal:
    return replace(
        meal,
        total_calories=sum_calories(meal.foods),
        total_macros=sum_macros(meal.foods),
    )


def _rollup(entry: DailyNutrition) -> DailyNutrition:
    foods = [food for meal in entry.meals for food in meal.foods]
    return replace(
        entry, total_calories=sum_calories(foods), total_macros=sum_macros(foods)
    )


def _find_day(
    entries: Sequence[DailyNutrition],
    day: datetime,
    tz: ZoneInfo,
) -> int | None:
    for index, entry in enumerate(entries):
        if start_of_day(entry.date, tz) == day:
            return index
    return None


def _locate_meal(
    entries: list[DailyNutrition], meal_id: str
) -> tuple[int, int] | None:
    for day_index, entry in enumerate(entries):
        for meal_index, meal in enumerate(entry.meals):
            if meal.id == meal_id:
                return day_index, meal_index
    return None


def _set_meal(
    entries: list[DailyNutrition],
    day_index: int,
    meal_index: int,
    meal: Meal | None,
) -> None:
    """Replace or drop a meal in place and re-roll its day, pruning empty days."""
    entry = entries[day_index]
    meals = list(entry.meals)
    if meal is None:
        del meals[meal_index]
    else:
        meals[meal_index] = meal
    if not meals:
        del entries[day_index]
        return
    entries[day_index] = _rollup(replace(entry, meals=tuple(meals)))


def _percentage(consumed: float, target: float) -> int:
    if target <= 0:
        return 100 if consumed > 0 else 0
    return int(min(100.0, round_half_up(consumed / target * 100)))
