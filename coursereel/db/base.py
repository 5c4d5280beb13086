"""SQLAlchemy declarative base and model imports for Alembic."""
from coursereel.db.session import Base

# Import all models so Alembic can see them
from coursereel.models.attempt import ScenarioAttempt  # noqa: F401
from coursereel.models.project import Project  # noqa: F401
from coursereel.models.scenario import Scenario  # noqa: F401
from coursereel.models.scene import Scene  # noqa: F401

__all__ = ["Base", "Project", "Scene", "Scenario", "ScenarioAttempt"]
