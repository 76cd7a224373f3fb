"""User profile and nutrition goal management."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

from fitness_companion.domain.goals import (
    calculate_bmr,
    calculate_nutrition_goals,
    calculate_tdee,
)
from fitness_companion.domain.users import (
    ActivityLevel,
    Anthropometry,
    DietaryPreference,
    FitnessGoal,
    Gender,
    NutritionGoals,
    UserData,
    UserPreferences,
)
from fitness_companion.services.key_value import JsonDocument, KeyValueStore

USER_KEY = "user"

DEFAULT_ANTHROPOMETRY = Anthropometry(
    height=170,
    weight=70,
    age=30,
    gender=Gender.MALE,
    activity_level=ActivityLevel.MODERATELY_ACTIVE,
)
DEFAULT_NUTRITION_GOALS = NutritionGoals(calories=2000, protein=150, carbs=200, fat=70)
DEFAULT_PREFERENCES = UserPreferences(
    fitness_goal=FitnessGoal.MAINTENANCE,
    dietary_preferences=(DietaryPreference.OMNIVORE,),
    meals_per_day=3,
    preferred_workout_duration=60,
    preferred_workout_days=(1, 3, 5),
    language="en",
)

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class UserProfileService:
    """Owns the single user profile.

    Anthropometry changes always re-derive the nutrition goals; preference
    changes only do so when the fitness goal actually changes. Updates are
    ignored (returning False) until a user has been initialised.
    """

    store: KeyValueStore
    clock: Callable[[], datetime] = _utcnow
    _user: JsonDocument[UserData | None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._user = JsonDocument(self.store, USER_KEY, UserData | None, None)

    def get_user(self) -> UserData | None:
        """Return the profile, if one was created."""
        return self._user.load()

    @property
    def is_initialized(self) -> bool:
        """True once a profile exists."""
        return self.get_user() is not None

    def initialize_user(self, name: str) -> UserData:
        """Create a profile with default measurements, goals and preferences."""
        now = self.clock()
        user = UserData(
            id=f"user_{uuid4().hex}",
            name=name,
            anthropometry=DEFAULT_ANTHROPOMETRY,
            nutrition_goals=DEFAULT_NUTRITION_GOALS,
            preferences=DEFAULT_PREFERENCES,
            created_at=now,
            updated_at=now,
        )
        self._user.save(user)
        _logger.info("User initialised: user_id=%s", user.id)
        return user

    def update_anthropometry(self, **changes: object) -> bool:
        """Merge measurements and recompute goals for the current fitness goal."""
        user = self.get_user()
        if user is None:
            return False
        anthropometry = replace(user.anthropometry, **changes)  # type: ignore[arg-type]
        user = replace(user, anthropometry=anthropometry, updated_at=self.clock())
        self._user.save(user)
        self.update_nutrition_goals(
            **_derived_changes(
                self.calculate_nutrition_goals(user.preferences.fitness_goal)
            )
        )
        return True

    def update_nutrition_goals(self, **changes: object) -> bool:
        """Merge into the nutrition goals."""
        user = self.get_user()
        if user is None:
            return False
        goals = replace(user.nutrition_goals, **changes)  # type: ignore[arg-type]
        self._user.save(
            replace(user, nutrition_goals=goals, updated_at=self.clock())
        )
        return True

    def update_preferences(self, **changes: object) -> bool:
        """Merge preferences; a new fitness goal triggers goal recalculation."""
        user = self.get_user()
        if user is None:
            return False
        previous_goal = user.preferences.fitness_goal
        preferences = replace(user.preferences, **changes)  # type: ignore[arg-type]
        self._user.save(
            replace(user, preferences=preferences, updated_at=self.clock())
        )
        new_goal = changes.get("fitness_goal")
        if new_goal is not None and new_goal != previous_goal:
            _logger.info("Fitness goal changed: %s -> %s", previous_goal, new_goal)
            self.update_nutrition_goals(
                **_derived_changes(
                    self.calculate_nutrition_goals(FitnessGoal(str(new_goal)))
                )
            )
        return True

    def set_avatar(self, uri: str) -> bool:
        """Store the avatar image reference."""
        user = self.get_user()
        if user is None:
            return False
        self._user.save(replace(user, avatar_uri=uri, updated_at=self.clock()))
        return True

    def calculate_bmr(self) -> float:
        """BMR of the current profile, or 0 without one."""
        user = self.get_user()
        return 0.0 if user is None else calculate_bmr(user.anthropometry)

    def calculate_tdee(self) -> float:
        """TDEE of the current profile, or 0 without one."""
        user = self.get_user()
        return 0.0 if user is None else calculate_tdee(user.anthropometry)

    def calculate_nutrition_goals(self, goal: FitnessGoal) -> NutritionGoals:
        """Targets for a goal given the current profile."""
        user = self.get_user()
        if user is None:
            return DEFAULT_NUTRITION_GOALS
        return calculate_nutrition_goals(
            goal, user.anthropometry.weight, calculate_tdee(user.anthropometry)
        )

    def reset_user(self) -> None:
        """Delete the profile."""
        self._user.clear()


def _derived_changes(goals: NutritionGoals) -> dict[str, object]:
    """Fields a derived goal set overrides; unset optional targets are kept."""
    return {key: value for key, value in vars(goals).items() if value is not None}
