"""Pydantic schemas for branching scenarios, choices and attempts."""
import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from coursereel.schemas.generation import ProjectOutSchema

ChoiceQuality = Literal["optimal", "suboptimal", "poor"]
OutcomeTier = Literal["good", "neutral", "poor"]
Difficulty = Literal["beginner", "intermediate", "advanced"]


class GenerateScenarioSchema(BaseModel):
    name: str | None = None
    topic: str = Field(min_length=1)
    industry: str = "General"
    difficulty: Difficulty = "beginner"
    decision_points: int = Field(default=3, ge=1, le=6)


# Generative payload for a scenario; the engine owns structure, ids and points.

class ChoiceContent(BaseModel):
    text: str = Field(min_length=1)
    rationale: str = Field(min_length=1)
    consequence_title: str = Field(min_length=1)
    consequence_body: str = Field(min_length=1)
    feedback: str = ""


class DecisionContent(BaseModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    narration: str = ""
    optimal: ChoiceContent
    suboptimal: ChoiceContent
    poor: ChoiceContent


class OutcomeContent(BaseModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    narration: str = ""


class OutcomeSetContent(BaseModel):
    good: OutcomeContent
    neutral: OutcomeContent
    poor: OutcomeContent


class ScenarioContent(BaseModel):
    intro_title: str = Field(min_length=1)
    intro_body: str = Field(min_length=1)
    intro_narration: str = ""
    decisions: list[DecisionContent] = Field(min_length=1)
    outcomes: OutcomeSetContent


class ScenarioOutSchema(BaseModel):
    id: int
    project_id: int
    title: str
    description: str | None = None
    topic: str
    industry: str
    difficulty: str
    decision_points: int
    max_score: int

    class Config:
        from_attributes = True


class ScenarioGeneratedSchema(BaseModel):
    project: ProjectOutSchema
    scenario: ScenarioOutSchema


class ChoiceSubmitSchema(BaseModel):
    scene_id: int
    choice_id: str = Field(min_length=1)


class ChoiceRecordSchema(BaseModel):
    scene_id: int
    choice_id: str
    quality: ChoiceQuality
    points: int
    timestamp: datetime


class AttemptOutSchema(BaseModel):
    id: int
    scenario_id: int
    user_id: str
    score: int
    max_score: int
    path: list[int]
    choices_made: list[ChoiceRecordSchema]
    status: Literal["in_progress", "completed"]
    outcome_tier: OutcomeTier | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_attempt(cls, attempt) -> "AttemptOutSchema":
        return cls(
            id=attempt.id,
            scenario_id=attempt.scenario_id,
            user_id=attempt.user_id,
            score=attempt.score,
            max_score=attempt.max_score,
            path=json.loads(attempt.path_json or "[]"),
            choices_made=json.loads(attempt.choices_json or "[]"),
            status=attempt.status,
            outcome_tier=attempt.outcome_tier,
            started_at=attempt.started_at,
            completed_at=attempt.completed_at,
        )


class ChoiceOutcomeSchema(BaseModel):
    next_scene_id: int | None
    points_earned: int
    total_score: int
    final_outcome_scene_id: int | None = None
    outcome_tier: OutcomeTier | None = None


class AttemptResultsSchema(BaseModel):
    attempt: AttemptOutSchema
    scenario_title: str
    scenario_max_score: int
    percentage: float


class LeaderboardEntrySchema(BaseModel):
    rank: int
    user_id: str
    best_score: int
    best_percentage: float
    fastest_time_seconds: float | None = None
    attempts: int


class HistoryEntrySchema(BaseModel):
    attempt: AttemptOutSchema
    scenario_title: str
    difficulty: str
    topic: str
