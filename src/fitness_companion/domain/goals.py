"""Energy expenditure and nutrition goal calculations.

BMR uses the Mifflin-St Jeor equation. It only has male and female
variants, so every non-male gender gets the female constant.
"""

from dataclasses import dataclass

from fitness_companion.domain.nutrition import round_half_up
from fitness_companion.domain.users import (
    ActivityLevel,
    Anthropometry,
    FitnessGoal,
    Gender,
    NutritionGoals,
)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9
FIBER_SHARE_OF_CARBS = 0.1


@dataclass(frozen=True)
class GoalProfile:
    """How a fitness goal shapes the daily targets."""

    calorie_multiplier: float
    protein_per_kg: float
    fat_share: float


GOAL_PROFILES: dict[FitnessGoal, GoalProfile] = {
    FitnessGoal.WEIGHT_LOSS: GoalProfile(0.8, 2.2, 0.35),
    FitnessGoal.MAINTENANCE: GoalProfile(1.0, 1.8, 0.30),
    FitnessGoal.MUSCLE_GAIN: GoalProfile(1.1, 2.0, 0.25),
    FitnessGoal.RECOMPOSITION: GoalProfile(1.0, 2.2, 0.30),
    FitnessGoal.PERFORMANCE: GoalProfile(1.05, 1.8, 0.25),
    FitnessGoal.HEALTH: GoalProfile(1.0, 1.6, 0.30),
}


def calculate_bmr(anthropometry: Anthropometry) -> float:
    """Basal metabolic rate in kcal per day."""
    base = (
        10 * anthropometry.weight
        + 6.25 * anthropometry.height
        - 5 * anthropometry.age
    )
    if anthropometry.gender == Gender.MALE:
        return base + 5
    return base - 161


def calculate_tdee(anthropometry: Anthropometry) -> float:
    """Total daily energy expenditure in kcal, rounded."""
    multiplier = ACTIVITY_MULTIPLIERS[anthropometry.activity_level]
    return round_half_up(calculate_bmr(anthropometry) * multiplier)


def calculate_nutrition_goals(
    goal: FitnessGoal, weight: float, tdee: float
) -> NutritionGoals:
    """Derive daily targets for a goal.

    Order matters: calories, then protein from body weight, then fat as a
    share of calories, and carbs fill whatever energy is left. Carbs are
    clamped at zero when protein and fat already exceed the calorie target.
    """
    profile = GOAL_PROFILES[goal]
    calories = round_half_up(tdee * profile.calorie_multiplier)
    protein = round_half_up(weight * profile.protein_per_kg)
    fat = round_half_up(calories * profile.fat_share / FAT_KCAL_PER_G)
    remaining = calories - protein * PROTEIN_KCAL_PER_G - fat * FAT_KCAL_PER_G
    carbs = max(0.0, round_half_up(remaining / CARBS_KCAL_PER_G))
    return NutritionGoals(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=round_half_up(carbs * FIBER_SHARE_OF_CARBS),
    )
