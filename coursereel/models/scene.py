"""Scene model: one ordered position in a project's scene graph."""
from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from coursereel.db.session import Base

# SQLite has no native JSON; list payloads are stored as JSON text (*_json columns)


class Scene(Base):
    __tablename__ = "scenes"
    __table_args__ = (UniqueConstraint("project_id", "scene_number", name="uq_scenes_project_number"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    scene_number = Column(Integer, nullable=False)
    # intro | chapter | content | closing | quiz | scenario_decision | consequence | final_outcome
    scene_type = Column(String(32), nullable=False)
    layout = Column(String(32), nullable=False, default="fulltext")

    eyebrow = Column(String(128), nullable=True)
    title = Column(String(255), nullable=True)
    subtitle = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    narration = Column(Text, nullable=True)
    bullets_json = Column(Text, nullable=True)
    cards_json = Column(Text, nullable=True)
    timeline_json = Column(Text, nullable=True)
    icon_items_json = Column(Text, nullable=True)
    stat_value = Column(String(64), nullable=True)
    stat_label = Column(String(255), nullable=True)
    quote = Column(Text, nullable=True)
    quote_author = Column(String(255), nullable=True)
    split_image = Column(String(255), nullable=True)

    # background: gradient XOR asset
    bg_type = Column(String(16), nullable=False, default="gradient")  # video | image | gradient
    gradient = Column(String(255), nullable=True)
    asset_url = Column(Text, nullable=True)
    asset_type = Column(String(16), nullable=True)
    asset_id = Column(String(64), nullable=True)
    asset_thumbnail = Column(Text, nullable=True)
    asset_keywords = Column(String(255), nullable=True)

    # branching
    choices_json = Column(Text, nullable=True)  # [{id, text, quality, next_scene_id, points, rationale}]
    next_scene_id = Column(Integer, nullable=True)
    choice_quality = Column(String(16), nullable=True)  # optimal | suboptimal | poor
    points = Column(Integer, nullable=False, default=0)
    feedback = Column(Text, nullable=True)
    outcome_tier = Column(String(16), nullable=True)  # good | neutral | poor (final_outcome only)

    # quiz
    quiz_question = Column(Text, nullable=True)
    quiz_options_json = Column(Text, nullable=True)
    quiz_correct_index = Column(Integer, nullable=True)
    quiz_explanation = Column(Text, nullable=True)

    project = relationship("Project", back_populates="scenes")
