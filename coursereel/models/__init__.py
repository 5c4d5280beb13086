from coursereel.models.project import Project
from coursereel.models.scene import Scene
from coursereel.models.scenario import Scenario
from coursereel.models.attempt import ScenarioAttempt

__all__ = ["Project", "Scene", "Scenario", "ScenarioAttempt"]
