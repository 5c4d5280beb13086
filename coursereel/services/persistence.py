"""Atomic write of a project and its scenes."""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coursereel.core.errors import NotFoundError, PersistenceError, StockMediaError
from coursereel.models.attempt import ScenarioAttempt
from coursereel.models.project import Project
from coursereel.models.scenario import Scenario
from coursereel.models.scene import Scene
from coursereel.services.scene_draft import SceneDraft

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_SCENE_NUMBER_BASE = 1000

ScenesInsertedHook = Callable[[Project, list[Scene]], Awaitable[None]]


@dataclass
class ProjectDescriptor:
    name: str
    prompt: str
    training_type: str = "compliance"
    project_type: str = "linear"
    tenant_id: str | None = None
    include_quiz: bool = False
    quiz_count: int = 0


def number_scenes(drafts: Sequence[SceneDraft], quiz_base: int = DEFAULT_QUIZ_SCENE_NUMBER_BASE) -> list[int]:
    """Contiguous numbers from 1 for regular scenes; quiz scenes from quiz_base + 1."""
    numbers = []
    regular = quiz = 0
    for draft in drafts:
        if draft.is_quiz:
            quiz += 1
            numbers.append(quiz_base + quiz)
        else:
            regular += 1
            numbers.append(regular)
    return numbers


async def _clear_previous_generation(db: AsyncSession, project_id: int) -> None:
    scenario_ids = select(Scenario.id).where(Scenario.project_id == project_id)
    await db.execute(delete(ScenarioAttempt).where(ScenarioAttempt.scenario_id.in_(scenario_ids)))
    await db.execute(delete(Scenario).where(Scenario.project_id == project_id))
    await db.execute(delete(Scene).where(Scene.project_id == project_id))


async def select_thumbnail(project: Project, scenes: Sequence[Scene], stock_client=None) -> str | None:
    """First image scene, else one image search on the project, else first video scene."""
    for scene in scenes:
        if scene.asset_type == "image" and scene.asset_url:
            return scene.asset_thumbnail or scene.asset_url

    if stock_client is not None:
        try:
            results = await stock_client.search(project.name or project.prompt, "image", 1)
        except StockMediaError as e:
            logger.warning("Thumbnail search failed for project %s: %s", project.id, e)
        else:
            if results:
                return results[0].thumbnail or results[0].url

    for scene in scenes:
        if scene.asset_type == "video" and scene.asset_url:
            return scene.asset_thumbnail or scene.asset_url
    return None


async def ensure_project_exists(db: AsyncSession, project_id: int | None) -> None:
    """Fail fast before any external call when regenerating a missing project."""
    if project_id is not None and await db.get(Project, project_id) is None:
        raise NotFoundError(f"Project {project_id} not found")


async def persist_generation(
    db: AsyncSession,
    descriptor: ProjectDescriptor,
    drafts: Sequence[SceneDraft],
    *,
    project_id: int | None = None,
    stock_client=None,
    quiz_base: int = DEFAULT_QUIZ_SCENE_NUMBER_BASE,
    on_scenes_inserted: ScenesInsertedHook | None = None,
) -> tuple[Project, list[Scene]]:
    """Write the project and every scene in one transaction.

    With ``project_id`` the existing project is regenerated: its previous
    scenes (and scenario data) are deleted first. Nothing is committed unless
    every row, including whatever ``on_scenes_inserted`` writes, succeeds.
    """
    try:
        if project_id is None:
            project = Project(status="draft")
            db.add(project)
        else:
            project = await db.get(Project, project_id)
            if project is None:
                raise NotFoundError(f"Project {project_id} not found")
            await _clear_previous_generation(db, project.id)
            project.status = "draft"

        project.name = descriptor.name
        project.prompt = descriptor.prompt
        project.training_type = descriptor.training_type
        project.project_type = descriptor.project_type
        if descriptor.tenant_id is not None:
            project.tenant_id = descriptor.tenant_id
        project.include_quiz = descriptor.include_quiz
        project.quiz_count = descriptor.quiz_count
        await db.flush()

        scenes = [
            draft.to_model(project.id, number)
            for draft, number in zip(drafts, number_scenes(drafts, quiz_base))
        ]
        db.add_all(scenes)
        await db.flush()

        if on_scenes_inserted is not None:
            await on_scenes_inserted(project, scenes)

        project.scene_count = sum(1 for s in scenes if s.scene_type != "quiz")
        project.thumbnail_url = await select_thumbnail(project, scenes, stock_client)
        project.status = "completed"
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Generation transaction failed, rolled back")
        raise PersistenceError(f"Failed to save generated project: {e}") from e
    except Exception:
        await db.rollback()
        raise

    await db.refresh(project)
    logger.info("Saved project %s with %d scenes", project.id, len(scenes))
    return project, scenes
