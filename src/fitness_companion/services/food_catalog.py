"""Shared food database that meals snapshot their foods from."""

from dataclasses import dataclass, field, replace
from uuid import uuid4

from fitness_companion.domain.nutrition import FoodItem, MacroNutrients, ServingUnit
from fitness_companion.services.key_value import JsonDocument, KeyValueStore

FOOD_DATABASE_KEY = "nutrition.food_database"


@dataclass(frozen=True)
class NewFood:
    """Food payload before it has an id."""

    name: str
    calories: float
    macros: MacroNutrients
    serving_size: float
    serving_unit: ServingUnit = ServingUnit.GRAM
    is_per_serving: bool = False
    image_uri: str | None = None


@dataclass
class FoodCatalogService:
    """CRUD over catalog foods.

    Logged meals keep their own copy of a food, so edits here never change
    history.
    """

    store: KeyValueStore
    _foods: JsonDocument[tuple[FoodItem, ...]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._foods = JsonDocument(
            self.store, FOOD_DATABASE_KEY, tuple[FoodItem, ...], ()
        )

    def add_food(self, food: NewFood) -> str:
        """Add a food and return its id."""
        food_id = f"food_{uuid4().hex}"
        created = FoodItem(
            id=food_id,
            name=food.name,
            calories=food.calories,
            macros=food.macros,
            serving_size=food.serving_size,
            serving_unit=food.serving_unit,
            is_per_serving=food.is_per_serving,
            image_uri=food.image_uri,
        )
        self._foods.save((*self._foods.load(), created))
        return food_id

    def update_food(self, food_id: str, **changes: object) -> bool:
        """Shallow-update a food; returns False when it does not exist."""
        if "id" in changes:
            raise TypeError("Food id cannot be changed")
        foods = list(self._foods.load())
        for index, food in enumerate(foods):
            if food.id == food_id:
                foods[index] = replace(food, **changes)  # type: ignore[arg-type]
                self._foods.save(tuple(foods))
                return True
        return False

    def delete_food(self, food_id: str) -> bool:
        """Remove a food from the catalog."""
        foods = self._foods.load()
        remaining = tuple(food for food in foods if food.id != food_id)
        if len(remaining) == len(foods):
            return False
        self._foods.save(remaining)
        return True

    def get_food(self, food_id: str) -> FoodItem | None:
        """Return a food by id."""
        return next((food for food in self._foods.load() if food.id == food_id), None)

    def search(self, query: str, limit: int = 10) -> list[FoodItem]:
        """Case-insensitive name search."""
        needle = query.strip().lower()
        matches = [food for food in self._foods.load() if needle in food.name.lower()]
        return matches[:limit]

    def list_foods(self) -> list[FoodItem]:
        """Return every food in insertion order."""
        return list(self._foods.load())

    def clear_all_data(self) -> None:
        """Empty the catalog."""
        self._foods.clear()
