"""Project model: one generated training video or branching scenario."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursereel.db.session import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)  # originating subject / prompt
    training_type = Column(String(64), nullable=False, default="compliance")
    project_type = Column(String(32), nullable=False, default="linear")  # linear | scenario
    scene_count = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, default="draft")
    thumbnail_url = Column(Text, nullable=True)
    include_quiz = Column(Boolean, nullable=False, default=False)
    quiz_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    scenes = relationship(
        "Scene",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Scene.scene_number",
    )
    scenario = relationship(
        "Scenario",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )
