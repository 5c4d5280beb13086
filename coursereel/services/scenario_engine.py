"""Branching scenario construction.

The decision tree is laid out in an arena (an indexed list of nodes) with no
cross-links, then a second pass wires every edge by arena index. Once the rows
are flushed the indices are translated to scene ids inside the same
transaction, so no row is ever written with a dangling reference.

Scene order: intro, then for each decision the decision scene followed by its
three consequences, then the three final outcomes (good, neutral, poor).
"""
import json
import logging
import random
from dataclasses import dataclass, field

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from coursereel.core.config import Settings, get_settings
from coursereel.core.errors import ContentSynthesisError, GenerationValidationError
from coursereel.models.project import Project
from coursereel.models.scenario import Scenario
from coursereel.models.scene import Scene
from coursereel.schemas.scenario import GenerateScenarioSchema, ScenarioContent
from coursereel.services.fallback import fallback_scenario
from coursereel.services.persistence import ProjectDescriptor, ensure_project_exists, persist_generation
from coursereel.services.scene_draft import SceneDraft
from coursereel.services.scoring import CHOICE_QUALITIES, OUTCOME_TIERS, ScoringPolicy, max_score_for_choices

logger = logging.getLogger(__name__)

INTRO_GRADIENT = "linear-gradient(135deg, #1e1b4b, #312e81)"
DECISION_GRADIENT = "linear-gradient(135deg, #312e81, #1e3a8a)"
QUALITY_GRADIENTS = {
    "optimal": "linear-gradient(135deg, #065f46, #047857)",
    "suboptimal": "linear-gradient(135deg, #78350f, #b45309)",
    "poor": "linear-gradient(135deg, #7f1d1d, #b91c1c)",
}
TIER_GRADIENTS = {
    "good": "linear-gradient(135deg, #065f46, #047857)",
    "neutral": "linear-gradient(135deg, #1e3a8a, #1d4ed8)",
    "poor": "linear-gradient(135deg, #44403c, #57534e)",
}

DIFFICULTY_GUIDANCE = {
    "beginner": "Clear right and wrong choices. Obvious consequences. Educational tone.",
    "intermediate": "More nuanced choices. Realistic workplace complexity. Some choices have trade-offs.",
    "advanced": "Subtle differences between choices. Complex ethical dilemmas. Multiple valid approaches.",
}

_CHOICE_LETTERS = "abc"


@dataclass
class ChoiceEdge:
    id: str
    text: str
    quality: str
    points: int
    rationale: str
    target: int | None = None  # arena index of the consequence scene


@dataclass
class ScenarioNode:
    draft: SceneDraft
    next: int | None = None  # arena index
    choices: list[ChoiceEdge] = field(default_factory=list)


@dataclass
class ScenarioArena:
    nodes: list[ScenarioNode]
    intro: int
    decisions: list[int]
    consequences: list[dict[str, int]]  # per decision: quality -> index
    finals: dict[str, int]  # tier -> index

    @property
    def drafts(self) -> list[SceneDraft]:
        return [n.draft for n in self.nodes]


def build_scenario_prompt(request: GenerateScenarioSchema) -> str:
    n = request.decision_points
    return (
        "You are an expert instructional designer creating a scenario-based training experience "
        "for corporate employees.\n\n"
        f"Topic: {request.topic}\nIndustry: {request.industry}\nDifficulty: {request.difficulty}\n"
        f"Decision points: {n}\n\n"
        f"Difficulty guidance: {DIFFICULTY_GUIDANCE[request.difficulty]}\n\n"
        f"Write a realistic {request.industry} workplace scenario with an intro, exactly {n} decisions "
        "and three endings (good, neutral, poor). Each decision has one optimal, one suboptimal and one "
        "poor choice, each with the consequence it leads to. Use specific names, situations and policies. "
        "Feedback should be educational, not preachy.\n\n"
        "Return ONLY this JSON:\n"
        '{"intro_title": "...", "intro_body": "...", "intro_narration": "...",\n'
        ' "decisions": [{"title": "...", "body": "situation", "narration": "...",\n'
        '   "optimal": {"text": "action", "rationale": "why", "consequence_title": "...", '
        '"consequence_body": "...", "feedback": "..."},\n'
        '   "suboptimal": {...same fields...}, "poor": {...same fields...}}],\n'
        ' "outcomes": {"good": {"title": "...", "body": "...", "narration": "..."}, '
        '"neutral": {...}, "poor": {...}}}'
    )


async def synthesize_scenario_content(content_client, request: GenerateScenarioSchema, *, timeout: float) -> ScenarioContent:
    """Generative scenario text, or the deterministic fallback tree."""
    try:
        payload = await content_client.complete_json(
            build_scenario_prompt(request), max_tokens=8000, timeout=timeout, temperature=0.7,
        )
        content = ScenarioContent.model_validate(payload)
        if len(content.decisions) < request.decision_points:
            raise ContentSynthesisError(
                f"Expected {request.decision_points} decisions, got {len(content.decisions)}"
            )
        content.decisions = content.decisions[: request.decision_points]
        return content
    except (ContentSynthesisError, ValidationError) as e:
        logger.warning("Using fallback scenario for %r: %s", request.topic, e)
        return fallback_scenario(request.topic, request.industry, request.decision_points)


def build_scenario_arena(
    content: ScenarioContent,
    scoring: ScoringPolicy,
    rng: random.Random | None = None,
) -> ScenarioArena:
    rng = rng or random.Random()
    nodes: list[ScenarioNode] = []

    def add(draft: SceneDraft, gradient: str) -> int:
        draft.bind_background("gradient", gradient=gradient)
        nodes.append(ScenarioNode(draft))
        return len(nodes) - 1

    # pass 1: every node, no links
    intro = add(SceneDraft(
        scene_type="intro",
        layout="fulltext",
        title=content.intro_title,
        body=content.intro_body,
        narration=content.intro_narration or content.intro_body,
    ), INTRO_GRADIENT)

    decisions: list[int] = []
    consequences: list[dict[str, int]] = []
    for n, decision in enumerate(content.decisions, start=1):
        decisions.append(add(SceneDraft(
            scene_type="scenario_decision",
            layout="fulltext",
            eyebrow=f"Decision {n} of {len(content.decisions)}",
            title=decision.title,
            body=decision.body,
            narration=decision.narration or decision.body,
        ), DECISION_GRADIENT))
        by_quality = {}
        for quality in CHOICE_QUALITIES:
            choice = getattr(decision, quality)
            by_quality[quality] = add(SceneDraft(
                scene_type="consequence",
                layout="fulltext",
                title=choice.consequence_title,
                body=choice.consequence_body,
                narration=choice.consequence_body,
                choice_quality=quality,
                points=scoring.points_for(quality),
                feedback=choice.feedback or choice.rationale,
            ), QUALITY_GRADIENTS[quality])
        consequences.append(by_quality)

    finals = {}
    for tier in OUTCOME_TIERS:
        outcome = getattr(content.outcomes, tier)
        finals[tier] = add(SceneDraft(
            scene_type="final_outcome",
            layout="fulltext",
            title=outcome.title,
            body=outcome.body,
            narration=outcome.narration or outcome.body,
            outcome_tier=tier,
        ), TIER_GRADIENTS[tier])

    # pass 2: edges
    nodes[intro].next = decisions[0]
    for d, (decision_index, decision) in enumerate(zip(decisions, content.decisions)):
        edges = []
        for letter, quality in zip(_CHOICE_LETTERS, CHOICE_QUALITIES):
            choice = getattr(decision, quality)
            edges.append(ChoiceEdge(
                id=f"choice_{d + 1}_{letter}",
                text=choice.text,
                quality=quality,
                points=scoring.points_for(quality),
                rationale=choice.rationale,
                target=consequences[d][quality],
            ))
        rng.shuffle(edges)  # presentation order must not give the answer away
        nodes[decision_index].choices = edges
        following = decisions[d + 1] if d + 1 < len(decisions) else None
        for consequence_index in consequences[d].values():
            # after the last decision the final outcome is chosen by tier
            nodes[consequence_index].next = following

    return ScenarioArena(nodes, intro, decisions, consequences, finals)


def link_scenes(arena: ScenarioArena, scenes: list[Scene]) -> None:
    """Translate arena indices into the flushed scene ids."""
    for node, scene in zip(arena.nodes, scenes):
        if node.next is not None:
            scene.next_scene_id = scenes[node.next].id
        if node.choices:
            scene.choices_json = json.dumps([
                {
                    "id": c.id,
                    "text": c.text,
                    "quality": c.quality,
                    "next_scene_id": scenes[c.target].id,
                    "points": c.points,
                    "rationale": c.rationale,
                }
                for c in node.choices
            ], ensure_ascii=False)


def validate_scenario_request(request: GenerateScenarioSchema) -> None:
    if not request.topic.strip():
        raise GenerationValidationError("Topic is required")
    if request.decision_points < 1:
        raise GenerationValidationError("At least one decision point is required")


async def generate_scenario(
    db: AsyncSession,
    request: GenerateScenarioSchema,
    *,
    content_client,
    settings: Settings | None = None,
    scoring: ScoringPolicy | None = None,
    rng: random.Random | None = None,
    project_id: int | None = None,
    tenant_id: str | None = None,
) -> tuple[Project, list[Scene], Scenario]:
    """Generate and persist a branching scenario project."""
    validate_scenario_request(request)
    await ensure_project_exists(db, project_id)
    settings = settings or get_settings()
    scoring = scoring or ScoringPolicy.from_settings(settings)

    content = await synthesize_scenario_content(content_client, request, timeout=settings.scenario_timeout_seconds)
    arena = build_scenario_arena(content, scoring, rng)
    name = request.name or f"{request.topic} Scenario"
    created: dict[str, Scenario] = {}

    async def wire(project: Project, scenes: list[Scene]) -> None:
        link_scenes(arena, scenes)
        scenario = Scenario(
            project_id=project.id,
            title=name,
            description=f"Scenario-based training on {request.topic}",
            topic=request.topic,
            industry=request.industry,
            difficulty=request.difficulty,
            decision_points=len(arena.decisions),
            max_score=max_score_for_choices(json.loads(s.choices_json) for s in scenes if s.choices_json),
        )
        db.add(scenario)
        await db.flush()
        created["scenario"] = scenario

    project, scenes = await persist_generation(
        db,
        ProjectDescriptor(
            name=name,
            prompt=f"Scenario training: {request.topic}",
            training_type="scenario",
            project_type="scenario",
            tenant_id=tenant_id,
        ),
        arena.drafts,
        project_id=project_id,
        on_scenes_inserted=wire,
    )
    scenario = created["scenario"]
    await db.refresh(scenario)
    logger.info("Generated scenario %s (%d scenes, max score %d)", scenario.id, len(scenes), scenario.max_score)
    return project, scenes, scenario
