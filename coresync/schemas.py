from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

Attribute = Optional[Union[str, int, float]]


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    userId: Optional[str] = None
    userName: Optional[str] = None


class ChatResponse(BaseModel):
    reply: str
    planSaved: bool
    planId: Optional[str] = None


class ProgramRequest(BaseModel):
    """Flat attributes posted by the voice assistant's tool call."""

    user_id: Optional[str] = None
    age: Attribute = None
    height: Attribute = None
    weight: Attribute = None
    injuries: Attribute = None
    workout_days: Attribute = None
    fitness_goal: Attribute = None
    fitness_level: Attribute = None
    dietary_restrictions: Attribute = None


class Routine(BaseModel):
    name: str
    sets: int
    reps: int


class ExerciseDay(BaseModel):
    day: str
    routines: List[Routine]


class WorkoutPlan(BaseModel):
    schedule: List[str]
    exercises: List[ExerciseDay]


class Meal(BaseModel):
    name: str
    foods: List[str]


class DietPlan(BaseModel):
    dailyCalories: int
    meals: List[Meal]


class GeneratedProgramData(BaseModel):
    planId: str
    workoutPlan: WorkoutPlan
    dietPlan: DietPlan


class GenerateProgramResponse(BaseModel):
    success: bool = True
    data: GeneratedProgramData


class PlanOut(BaseModel):
    id: str
    userId: str
    name: str
    isActive: bool
    workoutPlan: WorkoutPlan
    dietPlan: DietPlan
    createdAt: Optional[str] = None


class ActivePlanOut(BaseModel):
    plan: Optional[PlanOut] = None


class AssistantConfigOut(BaseModel):
    assistantId: str
    variableValues: Dict[str, str]
