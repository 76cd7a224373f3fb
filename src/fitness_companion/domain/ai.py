"""Models exchanged with the AI gateway."""

from enum import StrEnum

from pydantic import BaseModel, Field


class SystemPrompt(StrEnum):
    """Persona the assistant is asked to take."""

    FITNESS_TRAINER = "fitnessTrainer"
    INITIAL_ASSESSMENT = "initialAssessment"
    FOOD_ANALYSIS = "foodAnalysis"
    WORKOUT_ADVICE = "workoutAdvice"


class ResponseType(StrEnum):
    """Topic of a structured assistant reply."""

    NUTRITION = "nutrition"
    WORKOUT = "workout"
    GENERAL = "general"
    ANTHROPOMETRY = "anthropometry"


class ToolFunction(BaseModel):
    """Function call requested by the model."""

    name: str
    arguments: str


class ToolCall(BaseModel):
    """Tool call with JSON-encoded arguments."""

    id: str
    function: ToolFunction


class AIResponse(BaseModel):
    """Parsed assistant reply."""

    text: str
    data: dict[str, object] | None = None
    type: ResponseType | None = None
    next_steps: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)


class ChatRequestOptions(BaseModel):
    """Sampling options; unset values fall back to configured defaults."""

    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)


class TodayIntake(BaseModel):
    """What the user has eaten so far today."""

    calories: float
    protein: float
    carbs: float
    fat: float
    meals: list[str] = Field(default_factory=list)


class UserContext(BaseModel):
    """Profile summary sent along with a request for personalisation."""

    anthropometry: dict[str, object] | None = None
    nutrition_goals: dict[str, object] | None = None
    preferences: dict[str, object] | None = None
    today_intake: TodayIntake | None = None
