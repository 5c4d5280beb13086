"""Tests for coursereel.services.layouts."""

import random

import pytest

from coursereel.services.layouts import (
    ALL_LAYOUTS,
    GRADIENTS,
    PARTIAL_IMAGE_LAYOUTS,
    assign_layouts,
)
from coursereel.services.scene_plan import build_scene_plan


@pytest.fixture()
def plan(topics):
    return build_scene_plan("Safety 101", topics, 50)


class TestAssignLayouts:
    def test_one_design_per_slot(self, plan, rng):
        assert len(assign_layouts(plan, rng)) == len(plan)

    def test_fixed_slots(self, plan, rng):
        designs = assign_layouts(plan, rng)
        chapters = [d for s, d in zip(plan, designs) if s.kind == "chapter"]

        assert designs[0].bg_type == "video"
        assert designs[-1].bg_type == "video"
        assert all(d.bg_type == "gradient" for d in chapters)
        assert [d.gradient for d in chapters] == [GRADIENTS[i % len(GRADIENTS)] for i in range(len(chapters))]

    @pytest.mark.parametrize("seed", range(25))
    def test_neighbour_rules_hold_for_any_draw(self, plan, seed):
        designs = assign_layouts(plan, random.Random(seed))

        for a, b in zip(designs, designs[1:]):
            assert a.bg_type != b.bg_type

        content_layouts = [d.layout for s, d in zip(plan, designs) if s.kind == "content"]
        for a, b in zip(content_layouts, content_layouts[1:]):
            assert a != b

        for s, d in zip(plan, designs):
            if s.kind != "content":
                continue
            assert d.layout in ALL_LAYOUTS
            if d.layout in PARTIAL_IMAGE_LAYOUTS:
                assert d.bg_type == "image"
            assert (d.gradient is not None) == (d.bg_type == "gradient")

    def test_mix_of_full_and_partial_layouts(self, plan):
        partial = full = 0
        for seed in range(30):
            for s, d in zip(plan, assign_layouts(plan, random.Random(seed))):
                if s.kind == "content":
                    if d.layout in PARTIAL_IMAGE_LAYOUTS:
                        partial += 1
                    else:
                        full += 1
        assert partial > 0
        assert full > partial

    def test_stat_and_quote_prefer_gradient(self, plan):
        for seed in range(30):
            designs = assign_layouts(plan, random.Random(seed))
            for i, d in enumerate(designs):
                if d.layout not in ("stat", "quote"):
                    continue
                gradient_allowed = designs[i - 1].bg_type != "gradient" and plan[i + 1].kind != "chapter"
                assert d.bg_type == ("gradient" if gradient_allowed else "image")

    def test_same_seed_same_designs(self, plan):
        assert assign_layouts(plan, random.Random(7)) == assign_layouts(plan, random.Random(7))
