"""Home-screen widget sync."""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol

from fitness_companion.services.key_value import KeyValueStore
from fitness_companion.services.nutrition_ledger import NutritionLedgerService
from fitness_companion.services.users import (
    DEFAULT_NUTRITION_GOALS,
    UserProfileService,
)

TARGET_NUTRITION_KEY = "targetNutrition"
CONSUMED_NUTRITION_KEY = "consumedNutrition"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutritionData:
    """Calories and macros shown on the widget."""

    calories: float
    protein: float
    carbs: float
    fat: float


class WidgetBridge(Protocol):
    """Interface to the platform widget storage."""

    async def set_target_nutrition(self, data: NutritionData) -> None:
        """Publish the daily targets."""

    async def set_consumed_nutrition(self, data: NutritionData) -> None:
        """Publish what was eaten so far."""


@dataclass
class KeyValueWidgetBridge(WidgetBridge):
    """Widget bridge writing JSON payloads into a shared key-value store."""

    store: KeyValueStore

    async def set_target_nutrition(self, data: NutritionData) -> None:
        """Store the target payload."""
        self.store.set(TARGET_NUTRITION_KEY, json.dumps(asdict(data)))

    async def set_consumed_nutrition(self, data: NutritionData) -> None:
        """Store the consumed payload."""
        self.store.set(CONSUMED_NUTRITION_KEY, json.dumps(asdict(data)))


@dataclass
class WidgetSyncService:
    """Pushes goals and a day's intake to the widget bridge."""

    bridge: WidgetBridge
    ledger: NutritionLedgerService
    users: UserProfileService

    def target(self) -> NutritionData:
        """Daily targets of the profile, or the defaults without one."""
        user = self.users.get_user()
        goals = user.nutrition_goals if user else DEFAULT_NUTRITION_GOALS
        return NutritionData(
            calories=goals.calories,
            protein=goals.protein,
            carbs=goals.carbs,
            fat=goals.fat,
        )

    def consumed(self, day: datetime) -> NutritionData:
        """Totals eaten on the given day."""
        totals = self.ledger.calculate_total_nutrition(day)
        return NutritionData(
            calories=totals.calories,
            protein=totals.macros.protein,
            carbs=totals.macros.carbs,
            fat=totals.macros.fat,
        )

    async def sync(self, day: datetime) -> bool:
        """Publish both payloads; a bridge failure is logged, not raised."""
        try:
            await self.bridge.set_target_nutrition(self.target())
            await self.bridge.set_consumed_nutrition(self.consumed(day))
        except Exception:
            _logger.exception("Failed to sync widget nutrition")
            return False
        return True
