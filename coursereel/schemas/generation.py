"""Pydantic schemas for linear video generation: topics, requests, projects, scenes."""
import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Topic(BaseModel):
    name: str = Field(min_length=1)
    subtopics: list[str] = Field(default_factory=list)

    @field_validator("subtopics", mode="before")
    @classmethod
    def _flatten_subtopics(cls, value: Any) -> Any:
        # pasted outlines sometimes carry {"name": ...} objects instead of strings
        if isinstance(value, list):
            return [item.get("name", "") if isinstance(item, dict) else item for item in value]
        return value


class TopicsRequestSchema(BaseModel):
    subject: str = Field(min_length=1)
    training_type: str = "compliance"


class TopicsOutSchema(BaseModel):
    topics: list[Topic]
    source: str  # ai | fallback


class GenerateVideoSchema(BaseModel):
    subject: str = Field(min_length=1)
    course_name: str | None = None
    training_type: str = "compliance"
    topics: list[Topic] = Field(default_factory=list)
    scene_count: int = Field(default=15, ge=5, le=50)
    include_quiz: bool = False
    quiz_count: int = Field(default=5, ge=0, le=10)


class QuizQuestion(BaseModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2, max_length=6)
    correct_index: int = Field(ge=0)
    explanation: str = ""

    @field_validator("correct_index")
    @classmethod
    def _index_in_options(cls, value: int, info) -> int:
        options = info.data.get("options") or []
        if value >= len(options):
            raise ValueError("correct_index out of range")
        return value


def _loads(raw: str | None) -> Any:
    return json.loads(raw) if raw else None


class SceneOutSchema(BaseModel):
    id: int
    scene_number: int
    scene_type: str
    layout: str
    eyebrow: str | None = None
    title: str | None = None
    subtitle: str | None = None
    body: str | None = None
    narration: str | None = None
    bullets: list[str] | None = None
    cards: list[dict] | None = None
    timeline_items: list[dict] | None = None
    icon_items: list[dict] | None = None
    stat_value: str | None = None
    stat_label: str | None = None
    quote: str | None = None
    quote_author: str | None = None
    bg_type: str
    gradient: str | None = None
    asset_url: str | None = None
    asset_type: str | None = None
    asset_id: str | None = None
    asset_thumbnail: str | None = None
    choices: list[dict] | None = None
    next_scene_id: int | None = None
    choice_quality: str | None = None
    points: int = 0
    feedback: str | None = None
    outcome_tier: str | None = None
    quiz_question: str | None = None
    quiz_options: list[str] | None = None
    quiz_correct_index: int | None = None
    quiz_explanation: str | None = None

    @classmethod
    def from_scene(cls, scene) -> "SceneOutSchema":
        return cls(
            id=scene.id,
            scene_number=scene.scene_number,
            scene_type=scene.scene_type,
            layout=scene.layout,
            eyebrow=scene.eyebrow,
            title=scene.title,
            subtitle=scene.subtitle,
            body=scene.body,
            narration=scene.narration,
            bullets=_loads(scene.bullets_json),
            cards=_loads(scene.cards_json),
            timeline_items=_loads(scene.timeline_json),
            icon_items=_loads(scene.icon_items_json),
            stat_value=scene.stat_value,
            stat_label=scene.stat_label,
            quote=scene.quote,
            quote_author=scene.quote_author,
            bg_type=scene.bg_type,
            gradient=scene.gradient,
            asset_url=scene.asset_url,
            asset_type=scene.asset_type,
            asset_id=scene.asset_id,
            asset_thumbnail=scene.asset_thumbnail,
            choices=_loads(scene.choices_json),
            next_scene_id=scene.next_scene_id,
            choice_quality=scene.choice_quality,
            points=scene.points or 0,
            feedback=scene.feedback,
            outcome_tier=scene.outcome_tier,
            quiz_question=scene.quiz_question,
            quiz_options=_loads(scene.quiz_options_json),
            quiz_correct_index=scene.quiz_correct_index,
            quiz_explanation=scene.quiz_explanation,
        )


class ProjectOutSchema(BaseModel):
    id: int
    tenant_id: str | None = None
    name: str
    prompt: str
    training_type: str
    project_type: str
    scene_count: int
    status: str
    thumbnail_url: str | None = None
    include_quiz: bool = False
    quiz_count: int = 0
    created_at: datetime | None = None
    scenes: list[SceneOutSchema] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @classmethod
    def from_project(cls, project, scenes: list) -> "ProjectOutSchema":
        # with AsyncSession, scenes are loaded explicitly rather than via lazy relationship
        return cls(
            id=project.id,
            tenant_id=project.tenant_id,
            name=project.name,
            prompt=project.prompt,
            training_type=project.training_type,
            project_type=project.project_type,
            scene_count=project.scene_count,
            status=project.status,
            thumbnail_url=project.thumbnail_url,
            include_quiz=bool(project.include_quiz),
            quiz_count=project.quiz_count or 0,
            created_at=project.created_at,
            scenes=[SceneOutSchema.from_scene(s) for s in scenes],
        )


class VoiceOverRequestSchema(BaseModel):
    voice_id: str = Field(min_length=1)


class VoiceClipSchema(BaseModel):
    scene_id: int
    audio: str | None = None  # data:audio/mpeg;base64,...
    duration_ms: int = 0
