"""Pydantic request models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from fitness_companion.domain.ai import ChatRequestOptions
from fitness_companion.domain.chat import Attachment, MessageRole
from fitness_companion.domain.nutrition import FoodItem, MealType, ServingUnit
from fitness_companion.domain.progress import BodyMeasurements, Exercise, WorkoutType
from fitness_companion.domain.users import (
    ActivityLevel,
    DietaryPreference,
    DietaryRestriction,
    FitnessGoal,
    Gender,
)


class ChangeSet(BaseModel):
    """Partial update; only non-null fields present in the request apply."""

    def changes(self) -> dict[str, object]:
        """Non-null fields sent by the client, nested domain objects intact."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class MacrosIn(BaseModel):
    """Macronutrients in grams."""

    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)


class FoodIn(BaseModel):
    """Catalog food payload."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    macros: MacrosIn
    serving_size: float = Field(gt=0)
    serving_unit: ServingUnit = ServingUnit.GRAM
    is_per_serving: bool = False
    image_uri: str | None = None


class FoodUpdate(ChangeSet):
    """Partial catalog food update."""

    name: str | None = Field(default=None, min_length=1)
    calories: float | None = Field(default=None, ge=0)
    macros: MacrosIn | None = None
    serving_size: float | None = Field(default=None, gt=0)
    serving_unit: ServingUnit | None = None
    is_per_serving: bool | None = None
    image_uri: str | None = None


class FoodPortion(BaseModel):
    """A catalog food (by id) or an inline food, eaten in some amount."""

    food_id: str | None = None
    food_item: FoodItem | None = None
    amount: float = Field(gt=0)


class MealIn(BaseModel):
    """New meal payload; ``time`` defaults to ``date``."""

    type: MealType
    name: str = Field(min_length=1)
    date: datetime
    time: datetime | None = None
    foods: list[FoodPortion] = Field(default_factory=list)
    notes: str | None = None
    image_uri: str | None = None


class MealUpdate(ChangeSet):
    """Partial meal update."""

    type: MealType | None = None
    name: str | None = Field(default=None, min_length=1)
    date: datetime | None = None
    time: datetime | None = None
    notes: str | None = None
    image_uri: str | None = None


class FoodInMealUpdate(BaseModel):
    """New amount and/or replacement food for one meal entry."""

    amount: float | None = Field(default=None, gt=0)
    food_item: FoodItem | None = None


class WaterIn(BaseModel):
    """Water drunk on a day, in ml."""

    milliliters: float = Field(ge=0)


class MessageIn(BaseModel):
    """Chat turn sent to the trainer."""

    content: str = Field(min_length=1)
    attachments: list[Attachment] | None = None


class MessageUpdate(ChangeSet):
    """Partial chat message update."""

    role: MessageRole | None = None
    content: str | None = None
    timestamp: datetime | None = None
    attachments: tuple[Attachment, ...] | None = None
    error: bool | None = None


class ChatRequestIn(BaseModel):
    """Stateless chat completion with explicit options."""

    content: str = Field(min_length=1)
    options: ChatRequestOptions = Field(default_factory=ChatRequestOptions)


class FoodDescriptionIn(BaseModel):
    """Free-text food description."""

    description: str = Field(min_length=1)


class FoodImageIn(BaseModel):
    """Base64 encoded meal photo."""

    image_base64: str = Field(min_length=1)
    additional_text: str = ""


class AudioIn(BaseModel):
    """Base64 encoded voice recording."""

    audio_base64: str = Field(min_length=1)
    filename: str = "recording.m4a"


class WorkoutGoalsIn(BaseModel):
    """What the user wants to achieve with training."""

    goals: str = Field(min_length=1)


class ProfileIn(BaseModel):
    """Profile creation payload."""

    name: str = Field(min_length=1)


class AnthropometryUpdate(ChangeSet):
    """Partial body measurement update."""

    height: float | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    age: int | None = Field(default=None, gt=0)
    gender: Gender | None = None
    activity_level: ActivityLevel | None = None
    body_fat_percentage: float | None = Field(default=None, ge=0, le=100)
    waist_circumference: float | None = Field(default=None, gt=0)
    hip_circumference: float | None = Field(default=None, gt=0)
    chest_circumference: float | None = Field(default=None, gt=0)


class NutritionGoalsUpdate(ChangeSet):
    """Partial nutrition target update."""

    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    water: float | None = Field(default=None, ge=0)


class PreferencesUpdate(ChangeSet):
    """Partial preference update."""

    fitness_goal: FitnessGoal | None = None
    dietary_preferences: tuple[DietaryPreference, ...] | None = None
    dietary_restrictions: tuple[DietaryRestriction, ...] | None = None
    meals_per_day: int | None = Field(default=None, gt=0)
    preferred_workout_duration: int | None = Field(default=None, gt=0)
    preferred_workout_days: tuple[int, ...] | None = None
    language: str | None = None


class AvatarIn(BaseModel):
    """Avatar image reference."""

    uri: str = Field(min_length=1)


class WeightIn(BaseModel):
    """Weigh-in payload."""

    date: datetime
    weight: float = Field(gt=0)
    notes: str | None = None


class WeightUpdate(ChangeSet):
    """Partial weigh-in update."""

    date: datetime | None = None
    weight: float | None = Field(default=None, gt=0)
    notes: str | None = None


class PhotoIn(BaseModel):
    """Progress photo payload."""

    date: datetime
    image_uri: str = Field(min_length=1)
    weight: float | None = Field(default=None, gt=0)
    notes: str | None = None
    body_measurements: BodyMeasurements | None = None


class PhotoUpdate(ChangeSet):
    """Partial progress photo update."""

    date: datetime | None = None
    image_uri: str | None = Field(default=None, min_length=1)
    weight: float | None = Field(default=None, gt=0)
    notes: str | None = None
    body_measurements: BodyMeasurements | None = None


class WorkoutIn(BaseModel):
    """Workout payload; duration in minutes."""

    date: datetime
    type: WorkoutType
    name: str = Field(min_length=1)
    duration: float = Field(gt=0)
    calories_burned: float | None = Field(default=None, ge=0)
    notes: str | None = None
    exercises: tuple[Exercise, ...] | None = None


class WorkoutUpdate(ChangeSet):
    """Partial workout update."""

    date: datetime | None = None
    type: WorkoutType | None = None
    name: str | None = Field(default=None, min_length=1)
    duration: float | None = Field(default=None, gt=0)
    calories_burned: float | None = Field(default=None, ge=0)
    notes: str | None = None
    exercises: tuple[Exercise, ...] | None = None


class WidgetSyncIn(BaseModel):
    """Day to publish; defaults to now."""

    date: datetime | None = None
