"""Learner attempts through a branching scenario: path, score, completion."""
import json
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coursereel.core.errors import AttemptStateError, NotFoundError
from coursereel.models.attempt import ScenarioAttempt
from coursereel.models.scenario import Scenario
from coursereel.models.scene import Scene
from coursereel.schemas.scenario import (
    AttemptOutSchema,
    AttemptResultsSchema,
    ChoiceOutcomeSchema,
    HistoryEntrySchema,
    LeaderboardEntrySchema,
)
from coursereel.services.scoring import determine_outcome_tier, percentage

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def _get_scenario(db: AsyncSession, scenario_id: int) -> Scenario:
    scenario = await db.get(Scenario, scenario_id)
    if scenario is None:
        raise NotFoundError(f"Scenario {scenario_id} not found")
    return scenario


async def _get_attempt(db: AsyncSession, attempt_id: int, user_id: str | None = None) -> ScenarioAttempt:
    attempt = await db.get(ScenarioAttempt, attempt_id)
    if attempt is None or (user_id is not None and attempt.user_id != user_id):
        raise NotFoundError(f"Attempt {attempt_id} not found")
    return attempt


def _current_tier(attempt: ScenarioAttempt) -> str:
    qualities = [c["quality"] for c in json.loads(attempt.choices_json or "[]")]
    return determine_outcome_tier(qualities, attempt.score, attempt.max_score)


async def _expected_decision_id(db: AsyncSession, scenario: Scenario, history: list[dict]) -> int | None:
    """The decision scene the learner must answer next, or None once the tree is exhausted."""
    if not history:
        result = await db.execute(
            select(Scene.next_scene_id).where(
                Scene.project_id == scenario.project_id,
                Scene.scene_type == "intro",
            )
        )
        return result.scalar_one_or_none()

    last = history[-1]
    decision = await db.get(Scene, last["scene_id"])
    chosen = next(c for c in json.loads(decision.choices_json or "[]") if c["id"] == last["choice_id"])
    consequence = await db.get(Scene, chosen["next_scene_id"])
    return consequence.next_scene_id if consequence is not None else None


async def start_attempt(db: AsyncSession, scenario_id: int, user_id: str) -> ScenarioAttempt:
    scenario = await _get_scenario(db, scenario_id)
    attempt = ScenarioAttempt(
        scenario_id=scenario.id,
        user_id=user_id,
        score=0,
        max_score=scenario.max_score,
        path_json="[]",
        choices_json="[]",
        status="in_progress",
        started_at=_utcnow(),
    )
    db.add(attempt)
    await db.commit()
    await db.refresh(attempt)
    logger.info("User %s started attempt %s on scenario %s", user_id, attempt.id, scenario.id)
    return attempt


async def record_choice(
    db: AsyncSession,
    attempt_id: int,
    scene_id: int,
    choice_id: str,
    *,
    user_id: str | None = None,
) -> ChoiceOutcomeSchema:
    """Apply one choice and return where the learner goes next.

    Points always come from the stored choice. After the final decision the
    response also names the final outcome scene for the attempt's tier.
    """
    attempt = await _get_attempt(db, attempt_id, user_id)
    if attempt.status != "in_progress":
        raise AttemptStateError(f"Attempt {attempt.id} is already {attempt.status}")
    scenario = await _get_scenario(db, attempt.scenario_id)

    scene = await db.get(Scene, scene_id)
    if scene is None or scene.project_id != scenario.project_id or scene.scene_type != "scenario_decision":
        raise NotFoundError(f"Decision scene {scene_id} not found in scenario {scenario.id}")

    choices = json.loads(scene.choices_json or "[]")
    choice = next((c for c in choices if c["id"] == choice_id), None)
    if choice is None:
        raise NotFoundError(f"Choice {choice_id!r} not found on scene {scene_id}")

    history = json.loads(attempt.choices_json or "[]")
    if any(h["scene_id"] == scene_id for h in history):
        raise AttemptStateError(f"Scene {scene_id} was already answered in attempt {attempt.id}")
    expected = await _expected_decision_id(db, scenario, history)
    if scene_id != expected:
        raise AttemptStateError(f"Scene {scene_id} is not the next decision in attempt {attempt.id}")

    path = json.loads(attempt.path_json or "[]")
    path.append(scene_id)
    history.append({
        "scene_id": scene_id,
        "choice_id": choice_id,
        "quality": choice["quality"],
        "points": choice["points"],
        "timestamp": _utcnow().isoformat(),
    })
    attempt.path_json = json.dumps(path)
    attempt.choices_json = json.dumps(history)
    attempt.score = (attempt.score or 0) + choice["points"]

    outcome = ChoiceOutcomeSchema(
        next_scene_id=choice.get("next_scene_id"),
        points_earned=choice["points"],
        total_score=attempt.score,
    )
    if len(history) >= scenario.decision_points:
        tier = _current_tier(attempt)
        result = await db.execute(
            select(Scene.id).where(
                Scene.project_id == scenario.project_id,
                Scene.scene_type == "final_outcome",
                Scene.outcome_tier == tier,
            )
        )
        outcome.final_outcome_scene_id = result.scalar_one_or_none()
        outcome.outcome_tier = tier

    await db.commit()
    return outcome


async def complete_attempt(db: AsyncSession, attempt_id: int, *, user_id: str | None = None) -> ScenarioAttempt:
    attempt = await _get_attempt(db, attempt_id, user_id)
    if attempt.status == "completed":
        raise AttemptStateError(f"Attempt {attempt.id} is already completed")
    attempt.status = "completed"
    attempt.completed_at = _utcnow()
    attempt.outcome_tier = _current_tier(attempt)
    await db.commit()
    await db.refresh(attempt)
    logger.info("Attempt %s completed: %s/%s (%s)", attempt.id, attempt.score, attempt.max_score, attempt.outcome_tier)
    return attempt


async def get_results(db: AsyncSession, attempt_id: int, *, user_id: str | None = None) -> AttemptResultsSchema:
    attempt = await _get_attempt(db, attempt_id, user_id)
    scenario = await _get_scenario(db, attempt.scenario_id)
    return AttemptResultsSchema(
        attempt=AttemptOutSchema.from_attempt(attempt),
        scenario_title=scenario.title,
        scenario_max_score=scenario.max_score,
        percentage=percentage(attempt.score, attempt.max_score),
    )


async def get_leaderboard(db: AsyncSession, scenario_id: int, limit: int = 10) -> list[LeaderboardEntrySchema]:
    """Best completed attempt per user: percentage desc, then fastest time."""
    await _get_scenario(db, scenario_id)
    result = await db.execute(
        select(ScenarioAttempt).where(
            ScenarioAttempt.scenario_id == scenario_id,
            ScenarioAttempt.status == "completed",
        )
    )

    per_user: dict[str, dict] = {}
    for attempt in result.scalars().all():
        entry = per_user.setdefault(attempt.user_id, {
            "best_score": 0, "best_percentage": 0.0, "fastest": None, "attempts": 0,
        })
        entry["attempts"] += 1
        entry["best_score"] = max(entry["best_score"], attempt.score)
        entry["best_percentage"] = max(entry["best_percentage"], percentage(attempt.score, attempt.max_score))
        started, completed = _as_utc(attempt.started_at), _as_utc(attempt.completed_at)
        if started and completed:
            elapsed = (completed - started).total_seconds()
            if entry["fastest"] is None or elapsed < entry["fastest"]:
                entry["fastest"] = elapsed

    ranked = sorted(
        per_user.items(),
        key=lambda kv: (-kv[1]["best_percentage"], kv[1]["fastest"] if kv[1]["fastest"] is not None else float("inf")),
    )
    return [
        LeaderboardEntrySchema(
            rank=rank,
            user_id=user,
            best_score=entry["best_score"],
            best_percentage=entry["best_percentage"],
            fastest_time_seconds=entry["fastest"],
            attempts=entry["attempts"],
        )
        for rank, (user, entry) in enumerate(ranked[:limit], start=1)
    ]


async def get_user_history(db: AsyncSession, user_id: str) -> list[HistoryEntrySchema]:
    result = await db.execute(
        select(ScenarioAttempt, Scenario)
        .join(Scenario, Scenario.id == ScenarioAttempt.scenario_id)
        .where(ScenarioAttempt.user_id == user_id)
        .order_by(
            ScenarioAttempt.completed_at.desc().nulls_last(),
            ScenarioAttempt.started_at.desc(),
        )
        .limit(HISTORY_LIMIT)
    )
    return [
        HistoryEntrySchema(
            attempt=AttemptOutSchema.from_attempt(attempt),
            scenario_title=scenario.title,
            difficulty=scenario.difficulty,
            topic=scenario.topic,
        )
        for attempt, scenario in result.all()
    ]
