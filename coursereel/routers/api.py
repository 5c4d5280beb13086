"""API routes: JSON for generation, scenarios, attempts, leaderboard."""
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coursereel.core.config import Settings, get_settings
from coursereel.core.security import verify_session_token
from coursereel.db.session import get_db
from coursereel.models.project import Project
from coursereel.models.scene import Scene
from coursereel.schemas.generation import (
    GenerateVideoSchema,
    ProjectOutSchema,
    TopicsOutSchema,
    TopicsRequestSchema,
    VoiceClipSchema,
    VoiceOverRequestSchema,
)
from coursereel.schemas.scenario import (
    AttemptOutSchema,
    AttemptResultsSchema,
    ChoiceOutcomeSchema,
    ChoiceSubmitSchema,
    GenerateScenarioSchema,
    HistoryEntrySchema,
    LeaderboardEntrySchema,
    ScenarioGeneratedSchema,
    ScenarioOutSchema,
)
from coursereel.services import attempts
from coursereel.services.content_client import ContentSynthesisClient
from coursereel.services.generation import generate_linear_video
from coursereel.services.narration import VOICE_IDS, VOICES, SpeechSynthesisClient, generate_voice_overs
from coursereel.services.scenario_engine import generate_scenario
from coursereel.services.stock_assets import PexelsClient
from coursereel.services.synthesis import SceneSynthesizer

router = APIRouter(prefix="/api", tags=["api"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_content_client(settings: AppSettings) -> ContentSynthesisClient:
    return ContentSynthesisClient.from_settings(settings)


def get_scenario_client(settings: AppSettings) -> ContentSynthesisClient:
    return ContentSynthesisClient.from_settings(settings, model=settings.scenario_model)


def get_stock_client(settings: AppSettings) -> PexelsClient:
    return PexelsClient.from_settings(settings)


def get_speech_client(settings: AppSettings) -> SpeechSynthesisClient:
    return SpeechSynthesisClient.from_settings(settings)


def get_current_user(request: Request, settings: AppSettings) -> str:
    """User id from the signed auth cookie; 401 without one."""
    user_id = verify_session_token(request.cookies.get(settings.auth_cookie_name))
    if user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


CurrentUser = Annotated[str, Depends(get_current_user)]
TenantId = Annotated[str | None, Header(alias="X-Tenant-ID")]


async def _load_scenes(db: AsyncSession, project_id: int) -> list[Scene]:
    # IMPORTANT: with AsyncSession don't rely on lazy relationship loading
    result = await db.execute(
        select(Scene).where(Scene.project_id == project_id).order_by(Scene.scene_number.asc())
    )
    return list(result.scalars().all())


@router.post("/topics", response_model=TopicsOutSchema)
async def generate_topics(
    body: TopicsRequestSchema,
    content_client: Annotated[ContentSynthesisClient, Depends(get_content_client)],
    settings: AppSettings,
    user_id: CurrentUser,
):
    """Suggest a topic outline for a subject."""
    synthesizer = SceneSynthesizer(content_client, None, topics_timeout=settings.topics_timeout_seconds)
    topics, source = await synthesizer.generate_topics(body.subject, body.training_type)
    return TopicsOutSchema(topics=topics, source=source)


@router.post("/videos/generate", response_model=ProjectOutSchema)
async def generate_video(
    body: GenerateVideoSchema,
    db: DbSession,
    content_client: Annotated[ContentSynthesisClient, Depends(get_content_client)],
    stock_client: Annotated[PexelsClient, Depends(get_stock_client)],
    settings: AppSettings,
    user_id: CurrentUser,
    tenant_id: TenantId = None,
):
    project, scenes = await generate_linear_video(
        db, body, content_client=content_client, stock_client=stock_client, settings=settings, tenant_id=tenant_id,
    )
    return ProjectOutSchema.from_project(project, scenes)


@router.post("/projects/{project_id}/regenerate", response_model=ProjectOutSchema)
async def regenerate_video(
    project_id: int,
    body: GenerateVideoSchema,
    db: DbSession,
    content_client: Annotated[ContentSynthesisClient, Depends(get_content_client)],
    stock_client: Annotated[PexelsClient, Depends(get_stock_client)],
    settings: AppSettings,
    user_id: CurrentUser,
):
    """Replace every scene of an existing linear project."""
    project, scenes = await generate_linear_video(
        db, body, content_client=content_client, stock_client=stock_client, settings=settings, project_id=project_id,
    )
    return ProjectOutSchema.from_project(project, scenes)


@router.get("/projects/{project_id}", response_model=ProjectOutSchema)
async def get_project(project_id: int, db: DbSession, user_id: CurrentUser):
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return ProjectOutSchema.from_project(project, await _load_scenes(db, project_id))


@router.get("/voices")
async def list_voices():
    return {"voices": VOICES}


@router.post("/projects/{project_id}/voice-over", response_model=list[VoiceClipSchema])
async def create_voice_over(
    project_id: int,
    body: VoiceOverRequestSchema,
    db: DbSession,
    speech_client: Annotated[SpeechSynthesisClient, Depends(get_speech_client)],
    settings: AppSettings,
    user_id: CurrentUser,
):
    """Narrate every scene of a project, in scene order."""
    if body.voice_id not in VOICE_IDS:
        raise HTTPException(status_code=400, detail="Unknown voice")
    if not await db.get(Project, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    if not speech_client.is_configured:
        raise HTTPException(status_code=503, detail="Speech service is not configured")

    scenes = await _load_scenes(db, project_id)
    clips = await generate_voice_overs(speech_client, scenes, body.voice_id, delay_seconds=settings.speech_delay_seconds)
    return [
        VoiceClipSchema(scene_id=scene.id, audio=clip.data_url, duration_ms=clip.duration_ms)
        for scene, clip in zip(scenes, clips)
    ]


@router.post("/scenarios/generate", response_model=ScenarioGeneratedSchema)
async def create_scenario(
    body: GenerateScenarioSchema,
    db: DbSession,
    content_client: Annotated[ContentSynthesisClient, Depends(get_scenario_client)],
    settings: AppSettings,
    user_id: CurrentUser,
    tenant_id: TenantId = None,
):
    project, scenes, scenario = await generate_scenario(
        db, body, content_client=content_client, settings=settings, tenant_id=tenant_id,
    )
    return ScenarioGeneratedSchema(
        project=ProjectOutSchema.from_project(project, scenes),
        scenario=ScenarioOutSchema.model_validate(scenario),
    )


@router.post("/scenarios/{scenario_id}/attempts", response_model=AttemptOutSchema)
async def start_attempt(scenario_id: int, db: DbSession, user_id: CurrentUser):
    attempt = await attempts.start_attempt(db, scenario_id, user_id)
    return AttemptOutSchema.from_attempt(attempt)


@router.post("/attempts/{attempt_id}/choices", response_model=ChoiceOutcomeSchema)
async def record_choice(attempt_id: int, body: ChoiceSubmitSchema, db: DbSession, user_id: CurrentUser):
    """Record a choice; returns the scene to show next."""
    return await attempts.record_choice(db, attempt_id, body.scene_id, body.choice_id, user_id=user_id)


@router.post("/attempts/{attempt_id}/complete", response_model=AttemptOutSchema)
async def complete_attempt(attempt_id: int, db: DbSession, user_id: CurrentUser):
    attempt = await attempts.complete_attempt(db, attempt_id, user_id=user_id)
    return AttemptOutSchema.from_attempt(attempt)


@router.get("/attempts/{attempt_id}/results", response_model=AttemptResultsSchema)
async def get_results(attempt_id: int, db: DbSession, user_id: CurrentUser):
    return await attempts.get_results(db, attempt_id, user_id=user_id)


@router.get("/scenarios/{scenario_id}/leaderboard", response_model=list[LeaderboardEntrySchema])
async def get_leaderboard(
    scenario_id: int,
    db: DbSession,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return await attempts.get_leaderboard(db, scenario_id, limit)


@router.get("/me/history", response_model=list[HistoryEntrySchema])
async def get_history(db: DbSession, user_id: CurrentUser):
    return await attempts.get_user_history(db, user_id)
