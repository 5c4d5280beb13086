from coursereel.services.attempts import (
    complete_attempt,
    get_leaderboard,
    get_results,
    get_user_history,
    record_choice,
    start_attempt,
)
from coursereel.services.generation import generate_linear_video
from coursereel.services.narration import generate_voice_overs
from coursereel.services.scenario_engine import generate_scenario

__all__ = [
    "complete_attempt",
    "generate_linear_video",
    "generate_scenario",
    "generate_voice_overs",
    "get_leaderboard",
    "get_results",
    "get_user_history",
    "record_choice",
    "start_attempt",
]
