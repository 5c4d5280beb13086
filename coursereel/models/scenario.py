"""Scenario model: branching-training metadata attached to a scenario project."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursereel.db.session import Base


class Scenario(Base):
    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    topic = Column(String(255), nullable=False)
    industry = Column(String(128), nullable=False, default="General")
    difficulty = Column(String(32), nullable=False, default="beginner")  # beginner | intermediate | advanced
    decision_points = Column(Integer, nullable=False, default=3)
    max_score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    project = relationship("Project", back_populates="scenario")
    attempts = relationship("ScenarioAttempt", back_populates="scenario", cascade="all, delete-orphan", passive_deletes=True)
