"""Tests for attempt tracking, outcome tiers and the leaderboard."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from coursereel.core.errors import AttemptStateError, NotFoundError
from coursereel.schemas.scenario import GenerateScenarioSchema
from coursereel.services import attempts
from coursereel.services.scenario_engine import generate_scenario
from coursereel.services.scoring import determine_outcome_tier, max_score_for_choices


@pytest.fixture()
async def scenario_tree(db, content_client, settings, rng):
    project, scenes, scenario = await generate_scenario(
        db, GenerateScenarioSchema(topic="Workplace Safety", industry="Logistics", decision_points=3),
        content_client=content_client, settings=settings, rng=rng,
    )
    return scenario, scenes


def _decisions(scenes):
    return [s for s in scenes if s.scene_type == "scenario_decision"]


def _pick(scene, quality):
    return next(c for c in json.loads(scene.choices_json) if c["quality"] == quality)


async def play(db, scenario, scenes, user_id, qualities):
    attempt = await attempts.start_attempt(db, scenario.id, user_id)
    outcome = None
    for scene, quality in zip(_decisions(scenes), qualities):
        outcome = await attempts.record_choice(db, attempt.id, scene.id, _pick(scene, quality)["id"])
    return attempt, outcome


class TestRecordChoice:
    async def test_optimal_path_reaches_good_outcome(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        by_id = {s.id: s for s in scenes}

        attempt, outcome = await play(db, scenario, scenes, "user-1", ["optimal"] * 3)

        assert outcome.total_score == scenario.max_score == 30
        assert outcome.outcome_tier == "good"
        assert by_id[outcome.final_outcome_scene_id].outcome_tier == "good"
        assert by_id[outcome.next_scene_id].scene_type == "consequence"

        done = await attempts.complete_attempt(db, attempt.id)
        assert done.status == "completed"
        assert done.outcome_tier == "good"
        assert done.completed_at is not None

    async def test_max_score_matches_stored_choices(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        assert max_score_for_choices(json.loads(s.choices_json) for s in _decisions(scenes)) == scenario.max_score

    async def test_each_choice_returns_its_consequence(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        first = _decisions(scenes)[0]
        attempt = await attempts.start_attempt(db, scenario.id, "user-1")

        choice = _pick(first, "suboptimal")
        outcome = await attempts.record_choice(db, attempt.id, first.id, choice["id"])

        assert outcome.next_scene_id == choice["next_scene_id"]
        assert outcome.points_earned == 5
        assert outcome.total_score == 5
        assert outcome.final_outcome_scene_id is None

        results = await attempts.get_results(db, attempt.id)
        assert results.attempt.path == [first.id]
        assert results.attempt.choices_made[0].quality == "suboptimal"
        assert results.attempt.status == "in_progress"

    async def test_poor_path_reaches_poor_outcome(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        _, outcome = await play(db, scenario, scenes, "user-1", ["poor"] * 3)
        assert outcome.total_score == 6
        assert outcome.outcome_tier == "poor"

    async def test_mixed_path_tie_uses_percentage(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        # optimal + suboptimal + poor = 17/30 = 56.7%
        _, outcome = await play(db, scenario, scenes, "user-1", ["optimal", "suboptimal", "poor"])
        assert outcome.outcome_tier == "neutral"

    async def test_same_scene_twice_rejected(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        first = _decisions(scenes)[0]
        attempt = await attempts.start_attempt(db, scenario.id, "user-1")
        await attempts.record_choice(db, attempt.id, first.id, _pick(first, "poor")["id"])

        with pytest.raises(AttemptStateError):
            await attempts.record_choice(db, attempt.id, first.id, _pick(first, "optimal")["id"])

    async def test_decisions_must_follow_the_tree(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        first, second, last = _decisions(scenes)
        attempt = await attempts.start_attempt(db, scenario.id, "user-1")

        with pytest.raises(AttemptStateError):
            await attempts.record_choice(db, attempt.id, last.id, _pick(last, "suboptimal")["id"])

        outcome = await attempts.record_choice(db, attempt.id, first.id, _pick(first, "optimal")["id"])
        with pytest.raises(AttemptStateError):
            await attempts.record_choice(db, attempt.id, last.id, _pick(last, "optimal")["id"])

        consequence = next(s for s in scenes if s.id == outcome.next_scene_id)
        assert consequence.next_scene_id == second.id
        await attempts.record_choice(db, attempt.id, second.id, _pick(second, "optimal")["id"])

        results = await attempts.get_results(db, attempt.id)
        assert results.attempt.path == [first.id, second.id]
        assert results.attempt.score == 20

    async def test_unknown_choice_and_scene(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        first = _decisions(scenes)[0]
        attempt = await attempts.start_attempt(db, scenario.id, "user-1")

        with pytest.raises(NotFoundError):
            await attempts.record_choice(db, attempt.id, first.id, "choice_9_z")
        with pytest.raises(NotFoundError):
            await attempts.record_choice(db, attempt.id, scenes[0].id, "choice_1_a")  # intro is not a decision
        with pytest.raises(NotFoundError):
            await attempts.record_choice(db, 999, first.id, "choice_1_a")

    async def test_other_users_attempt_is_hidden(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        first = _decisions(scenes)[0]
        attempt = await attempts.start_attempt(db, scenario.id, "owner")
        with pytest.raises(NotFoundError):
            await attempts.record_choice(db, attempt.id, first.id, "choice_1_a", user_id="intruder")


class TestCompleteAttempt:
    async def test_completes_once(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        attempt, _ = await play(db, scenario, scenes, "user-1", ["optimal"] * 3)
        await attempts.complete_attempt(db, attempt.id)

        with pytest.raises(AttemptStateError):
            await attempts.complete_attempt(db, attempt.id)
        with pytest.raises(AttemptStateError):
            first = _decisions(scenes)[0]
            await attempts.record_choice(db, attempt.id, first.id, "choice_1_a")

    async def test_results_percentage(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        attempt, _ = await play(db, scenario, scenes, "user-1", ["optimal", "optimal", "suboptimal"])
        await attempts.complete_attempt(db, attempt.id)

        results = await attempts.get_results(db, attempt.id)
        assert results.percentage == 83.3
        assert results.scenario_max_score == 30
        assert results.scenario_title == "Workplace Safety Scenario"
        assert results.attempt.outcome_tier == "good"

    async def test_unknown_scenario(self, db):
        with pytest.raises(NotFoundError):
            await attempts.start_attempt(db, 404, "user-1")


class TestLeaderboard:
    async def test_ranked_by_best_percentage(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        for user, qualities in [("bea", ["poor"] * 3), ("al", ["optimal"] * 3), ("bea", ["optimal", "optimal", "poor"])]:
            attempt, _ = await play(db, scenario, scenes, user, qualities)
            await attempts.complete_attempt(db, attempt.id)
        # in-progress attempts are not ranked
        await attempts.start_attempt(db, scenario.id, "cy")

        board = await attempts.get_leaderboard(db, scenario.id)

        assert [(e.rank, e.user_id) for e in board] == [(1, "al"), (2, "bea")]
        assert board[0].best_percentage == 100.0
        assert board[1].best_score == 22
        assert board[1].attempts == 2

    async def test_ties_broken_by_fastest_time(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        now = datetime.now(timezone.utc)
        for user, seconds in [("slow", 300), ("fast", 90)]:
            attempt, _ = await play(db, scenario, scenes, user, ["optimal"] * 3)
            attempt = await attempts.complete_attempt(db, attempt.id)
            attempt.started_at = now - timedelta(seconds=seconds)
            attempt.completed_at = now
            await db.commit()

        board = await attempts.get_leaderboard(db, scenario.id)

        assert [e.user_id for e in board] == ["fast", "slow"]
        assert board[0].fastest_time_seconds == pytest.approx(90, abs=1)

    async def test_limit(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        for n in range(4):
            attempt, _ = await play(db, scenario, scenes, f"user-{n}", ["optimal"] * 3)
            await attempts.complete_attempt(db, attempt.id)
        assert len(await attempts.get_leaderboard(db, scenario.id, limit=2)) == 2


class TestHistory:
    async def test_user_history(self, db, scenario_tree):
        scenario, scenes = scenario_tree
        attempt, _ = await play(db, scenario, scenes, "user-1", ["optimal"] * 3)
        await attempts.complete_attempt(db, attempt.id)
        await attempts.start_attempt(db, scenario.id, "user-1")
        await attempts.start_attempt(db, scenario.id, "someone-else")

        history = await attempts.get_user_history(db, "user-1")

        assert len(history) == 2
        assert history[0].attempt.status == "completed"
        assert history[0].scenario_title == "Workplace Safety Scenario"
        assert history[0].topic == "Workplace Safety"
        assert history[1].attempt.status == "in_progress"


class TestDetermineOutcomeTier:
    @pytest.mark.parametrize("qualities,score,expected", [
        (["optimal", "optimal", "poor"], 22, "good"),
        (["suboptimal", "suboptimal", "optimal"], 20, "neutral"),
        (["poor", "poor", "optimal"], 14, "poor"),
        (["optimal", "poor"], 12, "neutral"),  # tie: 60%
        (["optimal", "suboptimal"], 15, "neutral"),  # tie: 75%
        ([], 0, "poor"),
    ])
    def test_tiers(self, qualities, score, expected):
        max_score = 10 * max(len(qualities), 1)
        assert determine_outcome_tier(qualities, score, max_score) == expected
