"""Deterministic content used whenever the generative service is unavailable.

Every builder returns the same pydantic types as the generative path.
"""
from coursereel.schemas.content import (
    BulletsContent,
    CardItem,
    FourCardContent,
    FullTextContent,
    IconListContent,
    QuoteContent,
    SceneContent,
    SplitContent,
    StatContent,
    TimelineContent,
    TimelineItem,
    TwoCardContent,
)
from coursereel.schemas.generation import Topic
from coursereel.schemas.scenario import (
    ChoiceContent,
    DecisionContent,
    OutcomeContent,
    OutcomeSetContent,
    ScenarioContent,
)

_STATS = (
    ("87%", "report improved outcomes"),
    ("3.5x", "faster results"),
    ("94%", "find this valuable"),
)

_QUOTES = (
    ("Excellence is a continuous journey of improvement.", "Industry Expert"),
    ("What gets measured gets managed.", "Peter Drucker"),
    ("Quality means doing it right when no one is looking.", "Henry Ford"),
)


def fallback_content(layout: str, topic: str, subtopic: str | None, index: int = 0) -> SceneContent:
    """Adequate scene content for ``layout`` without any external call."""
    subject = subtopic or topic
    narration = f"Let's look at {subject}, a key part of {topic}."

    if layout == "bullets":
        return BulletsContent(
            title=subject,
            body="Essential points to understand:",
            bullets=[
                f"Know the core principles of {subject}",
                "Apply them consistently in daily work",
                "Ask for help when something is unclear",
            ],
            narration=narration,
        )
    if layout == "stat":
        value, label = _STATS[index % len(_STATS)]
        return StatContent(title=subject, stat_value=value, stat_label=label, narration=narration)
    if layout == "quote":
        quote, author = _QUOTES[index % len(_QUOTES)]
        return QuoteContent(title=subject, quote=quote, quote_author=author, narration=narration)
    if layout == "cards2":
        return TwoCardContent(
            title=subject,
            cards=[
                CardItem(icon="✅", title="Do This", desc="Follow best practices"),
                CardItem(icon="❌", title="Avoid This", desc="Common mistakes"),
            ],
            narration=narration,
        )
    if layout == "cards4":
        return FourCardContent(
            title=subject,
            cards=[
                CardItem(icon="🎯", title="Focus", desc="Clear objectives"),
                CardItem(icon="📊", title="Measure", desc="Track metrics"),
                CardItem(icon="🔄", title="Adapt", desc="Adjust approach"),
                CardItem(icon="🚀", title="Execute", desc="Take action"),
            ],
            narration=narration,
        )
    if layout == "timeline":
        return TimelineContent(
            title=subject,
            timeline_items=[
                TimelineItem(year="Step 1", event="Understand the requirement"),
                TimelineItem(year="Step 2", event="Plan your approach"),
                TimelineItem(year="Step 3", event="Put it into practice"),
                TimelineItem(year="Step 4", event="Review and improve"),
            ],
            narration=narration,
        )
    if layout == "iconlist":
        return IconListContent(
            title=subject,
            icon_items=[
                CardItem(icon="💡", title="Awareness", desc=f"Recognise where {subject} applies"),
                CardItem(icon="🛡️", title="Prevention", desc="Stop problems before they start"),
                CardItem(icon="🤝", title="Collaboration", desc="Work with your team"),
                CardItem(icon="📈", title="Improvement", desc="Learn from every case"),
            ],
            narration=narration,
        )
    if layout in ("split", "image_left", "image_right"):
        return SplitContent(
            layout=layout,
            title=subject,
            body=f"{subject} matters because it shapes how we work together every day.",
            split_image=f"{subject} professional workplace",
            narration=narration,
        )
    return FullTextContent(title=subject, body="Essential knowledge for professional success.", narration=narration)


def fallback_topics(subject: str) -> list[Topic]:
    return [
        Topic(name=f"Understanding {subject}", subtopics=["Key Concepts", "Why It Matters", "Core Principles"]),
        Topic(name="Best Practices", subtopics=["Guidelines", "Common Mistakes", "Expert Tips"]),
        Topic(name="Implementation", subtopics=["Getting Started", "Daily Application", "Measuring Success"]),
        Topic(name="Advanced Topics", subtopics=["Complex Scenarios", "Case Studies", "Future Trends"]),
    ]


def fallback_scenario(topic: str, industry: str, decision_points: int) -> ScenarioContent:
    """A complete decision tree for ``topic`` with generic but coherent text."""
    decisions = []
    for n in range(1, decision_points + 1):
        decisions.append(DecisionContent(
            title=f"Decision Point {n}",
            body=f"A situation involving {topic} comes up at work. A colleague looks to you for what to do next.",
            narration=f"Decision {n}. How do you respond?",
            optimal=ChoiceContent(
                text="Follow the established policy and involve the right people",
                rationale="Policy exists to protect everyone and escalating early limits harm.",
                consequence_title="Excellent Choice!",
                consequence_body="The issue is handled quickly and correctly. Your team follows your lead.",
                feedback=f"You applied {topic} best practice and escalated through the proper channel.",
            ),
            suboptimal=ChoiceContent(
                text="Handle it yourself without telling anyone",
                rationale="Acting alone works sometimes but skips checks that catch mistakes.",
                consequence_title="Partly Right",
                consequence_body="The immediate problem is contained, but a follow-up issue surfaces later.",
                feedback="Good intent, but involving the responsible team would have closed the gap.",
            ),
            poor=ChoiceContent(
                text="Ignore it and hope it resolves on its own",
                rationale="Ignoring the issue lets the risk grow.",
                consequence_title="That Backfired",
                consequence_body="The situation escalates and now affects more people.",
                feedback=f"Ignoring {topic} issues rarely makes them go away. Act and report.",
            ),
        ))
    return ScenarioContent(
        intro_title=f"{topic} Training Scenario",
        intro_body=(
            f"You are about to experience a realistic {industry.lower()} workplace scenario that will test "
            f"your knowledge and decision-making regarding {topic}. Choose the response that best aligns "
            "with company policy and best practice."
        ),
        intro_narration=(
            f"Welcome to this interactive training scenario on {topic}. "
            f"You'll face {decision_points} key decisions. Choose wisely!"
        ),
        decisions=decisions,
        outcomes=OutcomeSetContent(
            good=OutcomeContent(
                title="Outstanding Performance",
                body=f"Your choices consistently reflected strong {topic} judgement.",
                narration="Well done. You handled every situation like a pro.",
            ),
            neutral=OutcomeContent(
                title="Solid Effort",
                body="You made some good calls, with room to sharpen a few decisions.",
                narration="Good work. Review the feedback to strengthen your approach.",
            ),
            poor=OutcomeContent(
                title="Room to Improve",
                body=f"Several choices increased risk. Revisit the {topic} guidelines and try again.",
                narration="This scenario was tough. Try again with what you've learned.",
            ),
        ),
    )
