"""Linear training-video generation: plan, design, synthesize, persist."""
import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from coursereel.core.config import Settings, get_settings
from coursereel.core.errors import GenerationValidationError
from coursereel.models.project import Project
from coursereel.models.scene import Scene
from coursereel.schemas.generation import GenerateVideoSchema
from coursereel.services.layouts import assign_layouts
from coursereel.services.persistence import ProjectDescriptor, ensure_project_exists, persist_generation
from coursereel.services.scene_plan import build_scene_plan
from coursereel.services.stock_assets import AssetUsage, StockAssetResolver
from coursereel.services.synthesis import SceneSynthesizer

logger = logging.getLogger(__name__)


def validate_video_request(request: GenerateVideoSchema) -> None:
    if not request.subject.strip():
        raise GenerationValidationError("Subject is required")
    if not request.topics:
        raise GenerationValidationError("At least one topic is required")
    if not any(t.subtopics for t in request.topics):
        raise GenerationValidationError("Topics need at least one subtopic")


async def generate_linear_video(
    db: AsyncSession,
    request: GenerateVideoSchema,
    *,
    content_client,
    stock_client,
    settings: Settings | None = None,
    rng: random.Random | None = None,
    project_id: int | None = None,
    tenant_id: str | None = None,
) -> tuple[Project, list[Scene]]:
    """Generate and persist a linear training video.

    Passing ``project_id`` regenerates that project in place. External-service
    failures degrade to fallback content or missing imagery; only validation
    and persistence errors reach the caller.
    """
    validate_video_request(request)
    await ensure_project_exists(db, project_id)
    settings = settings or get_settings()
    rng = rng or random.Random()
    course_name = request.course_name or request.subject

    plan = build_scene_plan(course_name, request.topics, request.scene_count)
    designs = assign_layouts(plan, rng)
    logger.info("Generating %d scenes for %r", len(plan), course_name)

    # dedup state lives for this run only
    resolver = StockAssetResolver(
        stock_client,
        AssetUsage(),
        rng=rng,
        top_n=settings.stock_top_n,
        page_size=settings.stock_page_size,
    )
    synthesizer = SceneSynthesizer(
        content_client,
        resolver,
        scene_timeout=settings.scene_timeout_seconds,
        topics_timeout=settings.topics_timeout_seconds,
    )
    chapter_count = sum(1 for t in request.topics if t.subtopics)
    drafts = await synthesizer.synthesize_all(plan, designs, course_name=course_name, chapter_count=chapter_count)

    if request.include_quiz:
        covered = [s.subtopic for s in plan if s.kind == "content"]
        drafts.extend(await synthesizer.synthesize_quiz(course_name, covered, request.quiz_count))

    descriptor = ProjectDescriptor(
        name=course_name,
        prompt=request.subject,
        training_type=request.training_type,
        project_type="linear",
        tenant_id=tenant_id,
        include_quiz=request.include_quiz,
        quiz_count=request.quiz_count if request.include_quiz else 0,
    )
    return await persist_generation(
        db,
        descriptor,
        drafts,
        project_id=project_id,
        stock_client=stock_client,
        quiz_base=settings.quiz_scene_number_base,
    )
