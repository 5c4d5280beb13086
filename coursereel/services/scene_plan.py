"""Expand a course outline into ordered scene slots."""
from dataclasses import dataclass
from typing import Sequence

from coursereel.schemas.generation import Topic


@dataclass(frozen=True)
class SceneSlot:
    kind: str  # intro | chapter | content | closing
    topic: str
    subtopic: str | None = None
    chapter_number: int | None = None
    subtopic_number: int | None = None


def build_scene_plan(course_name: str, topics: Sequence[Topic], scene_count: int) -> list[SceneSlot]:
    """Return intro, chapter + content per topic, closing; truncated to scene_count.

    Topics without subtopics get no chapter. Truncation cuts from the end; the
    intro always survives and a chapter left without any content slot after it
    is dropped as well.
    """
    slots = [SceneSlot("intro", course_name)]
    chapters = [t for t in topics if t.subtopics]
    for ti, topic in enumerate(chapters, start=1):
        slots.append(SceneSlot("chapter", topic.name, chapter_number=ti))
        for si, sub in enumerate(topic.subtopics, start=1):
            slots.append(SceneSlot("content", topic.name, sub, chapter_number=ti, subtopic_number=si))
    slots.append(SceneSlot("closing", course_name))

    planned = slots[: max(1, scene_count)]
    while len(planned) > 1 and planned[-1].kind == "chapter":
        planned.pop()
    return planned
