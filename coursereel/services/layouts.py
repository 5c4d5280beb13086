"""Layout and background-medium assignment for planned slots."""
import random
from dataclasses import dataclass
from typing import Sequence

from coursereel.services.scene_plan import SceneSlot

GRADIENTS = (
    "linear-gradient(135deg, #1e1b4b 0%, #312e81 100%)",
    "linear-gradient(135deg, #0f172a 0%, #1e3a5f 100%)",
    "linear-gradient(135deg, #14532d 0%, #166534 100%)",
    "linear-gradient(135deg, #7c2d12 0%, #9a3412 100%)",
    "linear-gradient(135deg, #4c1d95 0%, #6d28d9 100%)",
    "linear-gradient(135deg, #1e3a8a 0%, #1d4ed8 100%)",
    "linear-gradient(135deg, #134e4a 0%, #0f766e 100%)",
    "linear-gradient(135deg, #44403c 0%, #57534e 100%)",
)

MEDIA = ("video", "image", "gradient")

FULL_BACKGROUND_LAYOUTS = ("bullets", "fulltext", "stat", "quote", "cards2", "cards4", "timeline", "iconlist")
PARTIAL_IMAGE_LAYOUTS = ("split", "image_left", "image_right")
ALL_LAYOUTS = FULL_BACKGROUND_LAYOUTS + PARTIAL_IMAGE_LAYOUTS

# media each full-background layout reads well on
LAYOUT_MEDIA_AFFINITY = {
    "bullets": ("video", "image"),
    "fulltext": ("video", "image", "gradient"),
    "stat": ("gradient", "image"),
    "quote": ("gradient", "image"),
    "cards2": ("video", "image"),
    "cards4": ("image", "video"),
    "timeline": ("video", "gradient"),
    "iconlist": ("image", "gradient"),
}
GRADIENT_FIRST_LAYOUTS = frozenset({"stat", "quote"})

FULL_BACKGROUND_SHARE = 0.6

# non-content slots have a fixed medium
FIXED_MEDIUM = {"intro": "video", "closing": "video", "chapter": "gradient"}


@dataclass(frozen=True)
class SceneDesign:
    layout: str
    bg_type: str  # video | image | gradient
    gradient: str | None = None


def _pick_layout(candidates: Sequence[str], previous: str | None, allowed: set[str], rng: random.Random) -> str | None:
    options = [
        layout for layout in candidates
        if layout != previous and (layout in PARTIAL_IMAGE_LAYOUTS or set(LAYOUT_MEDIA_AFFINITY[layout]) & allowed)
    ]
    return rng.choice(options) if options else None


def _pick_medium(layout: str, allowed: set[str], rng: random.Random) -> str:
    options = [m for m in LAYOUT_MEDIA_AFFINITY[layout] if m in allowed]
    if layout in GRADIENT_FIRST_LAYOUTS and "gradient" in options:
        return "gradient"
    return rng.choice(options)


def assign_layouts(slots: Sequence[SceneSlot], rng: random.Random | None = None) -> list[SceneDesign]:
    """Return one SceneDesign per slot.

    Content slots: roughly 60% full-background layouts with a medium chosen by
    layout affinity, 40% partial-image layouts forced onto an image medium.
    No two consecutive content slots share a layout and no slot shares a medium
    with the slot before it or a fixed-medium slot after it. Chapters take
    palette gradients round-robin.
    """
    rng = rng or random.Random()
    designs: list[SceneDesign] = []
    previous_layout: str | None = None
    previous_medium: str | None = None
    chapter_index = 0
    content_index = 0

    for i, slot in enumerate(slots):
        if slot.kind == "chapter":
            design = SceneDesign("headline", "gradient", GRADIENTS[chapter_index % len(GRADIENTS)])
            chapter_index += 1
        elif slot.kind in FIXED_MEDIUM:
            design = SceneDesign("headline", FIXED_MEDIUM[slot.kind])
        else:
            following = slots[i + 1].kind if i + 1 < len(slots) else None
            allowed = set(MEDIA) - {previous_medium, FIXED_MEDIUM.get(following)}

            layout = None
            if rng.random() >= FULL_BACKGROUND_SHARE and "image" in allowed:
                layout = _pick_layout(PARTIAL_IMAGE_LAYOUTS, previous_layout, allowed, rng)
            if layout is None:
                layout = _pick_layout(FULL_BACKGROUND_LAYOUTS, previous_layout, allowed, rng)

            if layout in PARTIAL_IMAGE_LAYOUTS:
                design = SceneDesign(layout, "image")
            else:
                medium = _pick_medium(layout, allowed, rng)
                gradient = GRADIENTS[(chapter_index + content_index) % len(GRADIENTS)] if medium == "gradient" else None
                design = SceneDesign(layout, medium, gradient)
            previous_layout = layout
            content_index += 1

        previous_medium = design.bg_type
        designs.append(design)
    return designs
