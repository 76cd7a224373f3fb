"""Domain models for the user profile."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Gender(StrEnum):
    """Gender as entered by the user."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(StrEnum):
    """Typical weekly activity."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightlyActive"
    MODERATELY_ACTIVE = "moderatelyActive"
    VERY_ACTIVE = "veryActive"
    EXTRA_ACTIVE = "extraActive"


class FitnessGoal(StrEnum):
    """What the user is training for."""

    WEIGHT_LOSS = "weightLoss"
    MAINTENANCE = "maintenance"
    MUSCLE_GAIN = "muscleGain"
    RECOMPOSITION = "recomposition"
    PERFORMANCE = "performance"
    HEALTH = "health"


class DietaryPreference(StrEnum):
    """Diet style the user follows."""

    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    PESCATARIAN = "pescatarian"
    KETO = "keto"
    PALEO = "paleo"
    LOW_CARB = "lowCarb"
    LOW_FAT = "lowFat"
    GLUTEN_FREE = "glutenFree"
    DAIRY_FREE = "dairyFree"
    CUSTOM = "custom"


class RestrictionType(StrEnum):
    """Why a food is avoided."""

    ALLERGY = "allergy"
    INTOLERANCE = "intolerance"
    PREFERENCE = "preference"


@dataclass(frozen=True)
class DietaryRestriction:
    """A food the user avoids."""

    type: RestrictionType
    food: str


@dataclass(frozen=True)
class Anthropometry:
    """Body measurements; height in cm, weight in kg, age in years."""

    height: float
    weight: float
    age: int
    gender: Gender
    activity_level: ActivityLevel
    body_fat_percentage: float | None = None
    waist_circumference: float | None = None
    hip_circumference: float | None = None
    chest_circumference: float | None = None


@dataclass(frozen=True)
class NutritionGoals:
    """Daily targets; macros in grams, water in ml."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    water: float | None = None


@dataclass(frozen=True)
class UserPreferences:
    """Training and diet preferences."""

    fitness_goal: FitnessGoal
    dietary_preferences: tuple[DietaryPreference, ...] = ()
    dietary_restrictions: tuple[DietaryRestriction, ...] = ()
    meals_per_day: int = 3
    preferred_workout_duration: int = 60
    preferred_workout_days: tuple[int, ...] = ()
    language: str = "en"


@dataclass(frozen=True)
class UserData:
    """The single user profile of an installation."""

    id: str
    name: str
    anthropometry: Anthropometry
    nutrition_goals: NutritionGoals
    preferences: UserPreferences
    created_at: datetime
    updated_at: datetime
    avatar_uri: str | None = None
