from coursereel.schemas.content import SceneContent, parse_scene_content
from coursereel.schemas.generation import (
    GenerateVideoSchema,
    ProjectOutSchema,
    QuizQuestion,
    SceneOutSchema,
    Topic,
)
from coursereel.schemas.scenario import (
    AttemptOutSchema,
    ChoiceOutcomeSchema,
    GenerateScenarioSchema,
    LeaderboardEntrySchema,
    ScenarioContent,
)

__all__ = [
    "AttemptOutSchema",
    "ChoiceOutcomeSchema",
    "GenerateScenarioSchema",
    "GenerateVideoSchema",
    "LeaderboardEntrySchema",
    "ProjectOutSchema",
    "QuizQuestion",
    "ScenarioContent",
    "SceneContent",
    "SceneOutSchema",
    "Topic",
    "parse_scene_content",
]
