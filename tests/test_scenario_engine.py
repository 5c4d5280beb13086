"""Tests for branching scenario construction."""

import json
import random

import pytest
from sqlalchemy import func, select

from coursereel.core.errors import NotFoundError
from coursereel.models.scenario import Scenario
from coursereel.models.scene import Scene
from coursereel.schemas.scenario import GenerateScenarioSchema
from coursereel.services.fallback import fallback_scenario
from coursereel.services.scenario_engine import build_scenario_arena, generate_scenario
from coursereel.services.scoring import ScoringPolicy


def scenario_payload(decisions):
    def choice(label):
        return {
            "text": f"{label} action",
            "rationale": f"{label} rationale",
            "consequence_title": f"{label} result",
            "consequence_body": f"What happens after the {label} action.",
            "feedback": f"{label} feedback",
        }

    def handler(prompt):
        return {
            "intro_title": "Forklift Near Miss",
            "intro_body": "A forklift nearly clips a visitor on the warehouse floor.",
            "intro_narration": "Let's begin.",
            "decisions": [
                {
                    "title": f"Call {n}",
                    "body": f"Situation {n}",
                    "narration": f"Decision {n}",
                    "optimal": choice("Best"),
                    "suboptimal": choice("Okay"),
                    "poor": choice("Bad"),
                }
                for n in range(1, decisions + 1)
            ],
            "outcomes": {
                tier: {"title": f"{tier} ending", "body": f"The {tier} ending.", "narration": ""}
                for tier in ("good", "neutral", "poor")
            },
        }

    return handler


def _by_id(scenes):
    return {s.id: s for s in scenes}


class TestGenerateScenario:
    async def test_workplace_safety_has_sixteen_scenes(self, db, content_client, settings, rng):
        request = GenerateScenarioSchema(topic="Workplace Safety", industry="Manufacturing", decision_points=3)
        project, scenes, scenario = await generate_scenario(
            db, request, content_client=content_client, settings=settings, rng=rng,
        )

        assert len(scenes) == 16
        types = [s.scene_type for s in scenes]
        assert types.count("intro") == 1
        assert types.count("scenario_decision") == 3
        assert types.count("consequence") == 9
        assert types.count("final_outcome") == 3
        assert [s.scene_number for s in scenes] == list(range(1, 17))
        assert project.project_type == "scenario"
        assert project.scene_count == 16
        assert scenario.project_id == project.id
        assert scenario.max_score == 30
        assert scenario.decision_points == 3

        by_id = _by_id(scenes)
        intro = scenes[0]
        first_decision = by_id[intro.next_scene_id]
        assert first_decision.scene_type == "scenario_decision"
        targets = {c["next_scene_id"] for c in json.loads(first_decision.choices_json)}
        assert len(targets) == 3
        assert all(by_id[t].scene_type == "consequence" for t in targets)

    async def test_choice_invariants(self, db, content_client, settings, rng):
        _, scenes, _ = await generate_scenario(
            db, GenerateScenarioSchema(topic="Data Privacy", decision_points=4),
            content_client=content_client, settings=settings, rng=rng,
        )
        by_id = _by_id(scenes)

        for scene in scenes:
            if scene.scene_type != "scenario_decision":
                assert scene.choices_json is None
                continue
            choices = json.loads(scene.choices_json)
            assert len(choices) == 3
            points = {c["quality"]: c["points"] for c in choices}
            assert points["optimal"] > points["suboptimal"] > points["poor"]
            for c in choices:
                target = by_id[c["next_scene_id"]]
                assert target.project_id == scene.project_id
                assert target.choice_quality == c["quality"]
                assert target.points == c["points"]

    async def test_consequences_lead_to_next_decision(self, db, content_client, settings, rng):
        _, scenes, _ = await generate_scenario(
            db, GenerateScenarioSchema(topic="Ethics", decision_points=3),
            content_client=content_client, settings=settings, rng=rng,
        )
        by_id = _by_id(scenes)
        decisions = [s for s in scenes if s.scene_type == "scenario_decision"]

        for n, decision in enumerate(decisions):
            expected = decisions[n + 1].id if n + 1 < len(decisions) else None
            for c in json.loads(decision.choices_json):
                assert by_id[c["next_scene_id"]].next_scene_id == expected

        finals = [s for s in scenes if s.scene_type == "final_outcome"]
        assert sorted(s.outcome_tier for s in finals) == ["good", "neutral", "poor"]
        assert all(s.next_scene_id is None for s in finals)

    async def test_all_scenes_use_gradients(self, db, content_client, settings, rng):
        _, scenes, _ = await generate_scenario(
            db, GenerateScenarioSchema(topic="Ethics"), content_client=content_client, settings=settings, rng=rng,
        )
        assert all(s.bg_type == "gradient" and s.gradient and s.asset_url is None for s in scenes)

    async def test_generated_text_is_used(self, db, make_content_client, settings, rng):
        client = make_content_client(scenario_payload(3))
        _, scenes, scenario = await generate_scenario(
            db, GenerateScenarioSchema(topic="Forklifts", difficulty="advanced", decision_points=3),
            content_client=client, settings=settings, rng=rng,
        )

        assert scenes[0].title == "Forklift Near Miss"
        assert [s.title for s in scenes if s.scene_type == "scenario_decision"] == ["Call 1", "Call 2", "Call 3"]
        assert "Subtle differences between choices" in client.prompts[0]
        assert scenario.difficulty == "advanced"

    async def test_short_generated_tree_falls_back(self, db, make_content_client, settings, rng):
        _, scenes, _ = await generate_scenario(
            db, GenerateScenarioSchema(topic="Forklifts", decision_points=3),
            content_client=make_content_client(scenario_payload(2)), settings=settings, rng=rng,
        )
        assert len(scenes) == 16
        assert scenes[0].title == "Forklifts Training Scenario"

    async def test_regenerating_replaces_scenario(self, db, content_client, settings, rng):
        project, _, _ = await generate_scenario(
            db, GenerateScenarioSchema(topic="Ethics", decision_points=2), content_client=content_client,
            settings=settings, rng=rng,
        )
        await generate_scenario(
            db, GenerateScenarioSchema(topic="Ethics", decision_points=3), content_client=content_client,
            settings=settings, rng=rng, project_id=project.id,
        )

        assert (await db.execute(select(func.count(Scenario.id)))).scalar_one() == 1
        count = await db.execute(select(func.count(Scene.id)).where(Scene.project_id == project.id))
        assert count.scalar_one() == 16


    async def test_max_score_sums_best_stored_choice(self, db, content_client, settings, rng):
        _, scenes, scenario = await generate_scenario(
            db, GenerateScenarioSchema(topic="Ethics", decision_points=4), content_client=content_client,
            settings=settings, scoring=ScoringPolicy(12, 4, 1), rng=rng,
        )

        best = [max(c["points"] for c in json.loads(s.choices_json)) for s in scenes if s.scene_type == "scenario_decision"]
        assert best == [12, 12, 12, 12]
        assert scenario.max_score == 48

    async def test_regenerating_missing_project_calls_nothing(self, db, content_client, settings, rng):
        with pytest.raises(NotFoundError):
            await generate_scenario(
                db, GenerateScenarioSchema(topic="Ethics"), content_client=content_client,
                settings=settings, rng=rng, project_id=404,
            )
        assert content_client.prompts == []

class TestScenarioArena:
    def test_choice_ids_and_order(self):
        content = fallback_scenario("Safety", "General", 2)
        arena = build_scenario_arena(content, ScoringPolicy(), random.Random(0))

        for d, index in enumerate(arena.decisions, start=1):
            ids = sorted(c.id for c in arena.nodes[index].choices)
            assert ids == [f"choice_{d}_a", f"choice_{d}_b", f"choice_{d}_c"]

    def test_display_order_is_shuffled(self):
        content = fallback_scenario("Safety", "General", 6)
        orders = set()
        for seed in range(10):
            arena = build_scenario_arena(content, ScoringPolicy(), random.Random(seed))
            orders.update(tuple(c.quality for c in arena.nodes[i].choices) for i in arena.decisions)
        assert len(orders) > 1

    def test_custom_scoring(self):
        arena = build_scenario_arena(fallback_scenario("Safety", "General", 1), ScoringPolicy(3, 2, 1))
        assert sorted(c.points for c in arena.nodes[arena.decisions[0]].choices) == [1, 2, 3]

    def test_scoring_must_descend(self):
        with pytest.raises(ValueError):
            ScoringPolicy(optimal=5, suboptimal=5, poor=1)
