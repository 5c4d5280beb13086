"""ScenarioAttempt model: one learner's traversal of a branching scenario."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursereel.db.session import Base


class ScenarioAttempt(Base):
    __tablename__ = "scenario_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)
    max_score = Column(Integer, nullable=False, default=0)  # captured from the scenario at start
    path_json = Column(Text, nullable=False, default="[]")  # visited scene ids
    choices_json = Column(Text, nullable=False, default="[]")  # [{scene_id, choice_id, quality, points, timestamp}]
    status = Column(String(16), nullable=False, default="in_progress")  # in_progress | completed
    outcome_tier = Column(String(16), nullable=True)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    scenario = relationship("Scenario", back_populates="attempts")
