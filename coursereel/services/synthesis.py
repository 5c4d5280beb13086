"""Per-slot scene synthesis: generative content with a deterministic fallback."""
import logging
from typing import Sequence

from pydantic import ValidationError

from coursereel.core.errors import ContentSynthesisError
from coursereel.schemas.content import SceneContent, parse_scene_content
from coursereel.schemas.generation import QuizQuestion, Topic
from coursereel.services.fallback import fallback_content, fallback_topics
from coursereel.services.layouts import GRADIENTS, SceneDesign
from coursereel.services.scene_draft import SceneDraft
from coursereel.services.scene_plan import SceneSlot
from coursereel.services.stock_assets import StockAssetResolver

logger = logging.getLogger(__name__)

_JSON_ONLY = "IMPORTANT: Return ONLY valid JSON, no markdown, no other text."

# layout -> (instruction, JSON shape naming the required fields)
LAYOUT_TEMPLATES = {
    "bullets": (
        "Generate 3 specific, actionable bullet points.",
        '{"body": "intro sentence", "bullets": ["point1", "point2", "point3"], "narration": "script"}',
    ),
    "fulltext": (
        "Write one comprehensive paragraph.",
        '{"body": "detailed paragraph", "narration": "script"}',
    ),
    "stat": (
        "Generate a realistic, relevant statistic.",
        '{"stat_value": "87%", "stat_label": "description", "narration": "script"}',
    ),
    "quote": (
        "Generate an impactful quote.",
        '{"quote": "quote text", "quote_author": "Author Name", "narration": "script"}',
    ),
    "cards2": (
        "Generate a do/don't comparison.",
        '{"cards": [{"icon": "✅", "title": "Do", "desc": "..."}, {"icon": "❌", "title": "Don\'t", "desc": "..."}], '
        '"narration": "script"}',
    ),
    "cards4": (
        "Generate 4 actionable steps.",
        '{"cards": [{"icon": "🎯", "title": "Step", "desc": "..."}] (exactly 4 items), "narration": "script"}',
    ),
    "timeline": (
        "Generate a 4-step progression.",
        '{"timeline_items": [{"year": "Step 1", "event": "..."}] (4 items), "narration": "script"}',
    ),
    "iconlist": (
        "Generate 4 key insights.",
        '{"icon_items": [{"icon": "💡", "title": "...", "desc": "..."}] (4 items), "narration": "script"}',
    ),
    "split": (
        "Write descriptive content to sit beside a featured image.",
        '{"body": "paragraph", "split_image": "image search keywords", "narration": "script"}',
    ),
}
LAYOUT_TEMPLATES["image_left"] = LAYOUT_TEMPLATES["split"]
LAYOUT_TEMPLATES["image_right"] = LAYOUT_TEMPLATES["split"]


def build_scene_prompt(layout: str, topic: str, subtopic: str | None, course_name: str) -> str:
    instruction, shape = LAYOUT_TEMPLATES.get(layout, LAYOUT_TEMPLATES["fulltext"])
    return (
        f'Generate content for a training scene about "{subtopic or topic}" in the topic "{topic}" '
        f"for {course_name}.\n"
        f"{instruction}\n"
        f"Return JSON: {shape}\n"
        f"{_JSON_ONLY}"
    )


def build_topics_prompt(subject: str, training_type: str) -> str:
    return (
        f"Create a training course outline for: {subject}\n"
        f"Training type: {training_type}\n\n"
        "Return 4-6 main topics with 2-4 subtopics each.\n"
        'Return ONLY valid JSON: {"topics":[{"name":"Topic","subtopics":["Sub1","Sub2"]}]}'
    )


def build_quiz_prompt(course_name: str, subtopics: Sequence[str], count: int) -> str:
    covered = "\n".join(f"- {s}" for s in subtopics)
    return (
        f"Write {count} multiple-choice questions for the training course {course_name}.\n"
        f"The course covered:\n{covered}\n\n"
        "Each question has 4 options and exactly one correct answer.\n"
        'Return JSON: {"questions": [{"question": "...", "options": ["a", "b", "c", "d"], '
        '"correct_index": 0, "explanation": "why"}]}\n'
        f"{_JSON_ONLY}"
    )


class SceneSynthesizer:
    """Turns planned slots and their designs into fully populated SceneDrafts.

    Slots are processed strictly one at a time; the resolver's dedup state is
    shared across the whole run.
    """

    def __init__(
        self,
        content_client,
        resolver: StockAssetResolver,
        *,
        scene_timeout: float = 30.0,
        topics_timeout: float = 60.0,
    ) -> None:
        self.content_client = content_client
        self.resolver = resolver
        self.scene_timeout = scene_timeout
        self.topics_timeout = topics_timeout

    async def synthesize_content(self, layout: str, slot: SceneSlot, course_name: str, index: int) -> SceneContent:
        prompt = build_scene_prompt(layout, slot.topic, slot.subtopic, course_name)
        try:
            payload = await self.content_client.complete_json(prompt, max_tokens=1000, timeout=self.scene_timeout)
            if not isinstance(payload, dict):
                raise ContentSynthesisError("Expected a JSON object")
            return parse_scene_content(layout, payload)
        except (ContentSynthesisError, ValidationError) as e:
            logger.warning("Using fallback content for %r (%s): %s", slot.subtopic or slot.topic, layout, e)
            return fallback_content(layout, slot.topic, slot.subtopic, index)

    async def build_scene(
        self,
        slot: SceneSlot,
        design: SceneDesign,
        *,
        course_name: str,
        index: int,
        chapter_count: int,
    ) -> SceneDraft:
        if slot.kind == "intro":
            draft = SceneDraft(
                scene_type="intro",
                layout=design.layout,
                title=course_name,
                subtitle=f"{chapter_count} Chapters • Professional Training",
                body="Master essential skills through engaging, practical learning.",
                narration=f"Welcome to {course_name}.",
                asset_keywords=f"{course_name} corporate professional team success modern office",
            )
        elif slot.kind == "chapter":
            draft = SceneDraft(
                scene_type="chapter",
                layout=design.layout,
                eyebrow=f"Chapter {slot.chapter_number}",
                title=slot.topic,
                subtitle="Key concepts and practical applications",
                narration=f"Chapter {slot.chapter_number}: {slot.topic}.",
            )
        elif slot.kind == "closing":
            draft = SceneDraft(
                scene_type="closing",
                layout=design.layout,
                title="Training Complete!",
                subtitle="Congratulations on Your Achievement",
                body=f"You completed all {chapter_count} chapters. Apply what you learned!",
                narration=f"Congratulations on completing {course_name}.",
                asset_keywords="success achievement celebration team applause business happy",
            )
        else:
            logger.info("Generating scene %d: %r (%s/%s)", index + 1, slot.subtopic, design.layout, design.bg_type)
            content = await self.synthesize_content(design.layout, slot, course_name, index)
            draft = SceneDraft(
                scene_type="content",
                eyebrow=f"{slot.chapter_number}.{slot.subtopic_number}",
                title=slot.subtopic,
            )
            draft.apply_content(content)
            draft.asset_keywords = getattr(content, "split_image", None) or f"{slot.subtopic} professional workplace business"

        if design.bg_type == "gradient":
            draft.bind_background("gradient", gradient=design.gradient)
        else:
            asset = await self.resolver.resolve(draft.asset_keywords, design.bg_type)
            if asset is None:
                logger.info("Scene %d persists without a %s asset", index + 1, design.bg_type)
            draft.bind_background(design.bg_type, asset=asset)
        return draft

    async def synthesize_all(
        self,
        plan: Sequence[SceneSlot],
        designs: Sequence[SceneDesign],
        *,
        course_name: str,
        chapter_count: int,
    ) -> list[SceneDraft]:
        drafts = []
        for index, (slot, design) in enumerate(zip(plan, designs)):
            drafts.append(await self.build_scene(
                slot, design, course_name=course_name, index=index, chapter_count=chapter_count,
            ))
        return drafts

    async def generate_topics(self, subject: str, training_type: str = "compliance") -> tuple[list[Topic], str]:
        """Return (topics, source) where source is ``ai`` or ``fallback``."""
        try:
            payload = await self.content_client.complete_json(
                build_topics_prompt(subject, training_type), max_tokens=1500, timeout=self.topics_timeout,
            )
            topics = [Topic.model_validate(t) for t in payload["topics"]]
            if topics:
                return topics, "ai"
            logger.warning("Topic generation returned no topics for %r", subject)
        except (ContentSynthesisError, ValidationError, KeyError, TypeError) as e:
            logger.warning("Topic generation failed for %r: %s", subject, e)
        return fallback_topics(subject), "fallback"

    async def synthesize_quiz(self, course_name: str, subtopics: Sequence[str], count: int) -> list[SceneDraft]:
        """Quiz scenes for the covered subtopics. Failure is logged and yields none."""
        if count <= 0 or not subtopics:
            return []
        try:
            payload = await self.content_client.complete_json(
                build_quiz_prompt(course_name, subtopics, count), max_tokens=2000, timeout=self.topics_timeout,
            )
            questions = [QuizQuestion.model_validate(q) for q in payload["questions"]][:count]
        except (ContentSynthesisError, ValidationError, KeyError, TypeError) as e:
            logger.warning("Quiz generation failed for %r, continuing without quiz: %s", course_name, e)
            return []

        drafts = []
        for n, q in enumerate(questions, start=1):
            draft = SceneDraft(
                scene_type="quiz",
                layout="quiz",
                eyebrow=f"Question {n} of {len(questions)}",
                title=q.question,
                narration=q.question,
                quiz_question=q.question,
                quiz_options=q.options,
                quiz_correct_index=q.correct_index,
                quiz_explanation=q.explanation,
            )
            draft.bind_background("gradient", gradient=GRADIENTS[0])
            drafts.append(draft)
        return drafts
