"""In-memory scene record built by the producers before persistence."""
import json
from dataclasses import dataclass
from typing import Any

from coursereel.models.scene import Scene
from coursereel.schemas.content import SceneContent
from coursereel.services.stock_assets import StockAsset


def _dumps(value: Any) -> str | None:
    return json.dumps(value, ensure_ascii=False) if value is not None else None


@dataclass
class SceneDraft:
    scene_type: str
    layout: str = "fulltext"
    eyebrow: str | None = None
    title: str | None = None
    subtitle: str | None = None
    body: str | None = None
    narration: str | None = None
    bullets: list[str] | None = None
    cards: list[dict] | None = None
    timeline_items: list[dict] | None = None
    icon_items: list[dict] | None = None
    stat_value: str | None = None
    stat_label: str | None = None
    quote: str | None = None
    quote_author: str | None = None
    split_image: str | None = None
    bg_type: str = "gradient"
    gradient: str | None = None
    asset: StockAsset | None = None
    asset_keywords: str | None = None
    choice_quality: str | None = None
    points: int = 0
    feedback: str | None = None
    outcome_tier: str | None = None
    quiz_question: str | None = None
    quiz_options: list[str] | None = None
    quiz_correct_index: int | None = None
    quiz_explanation: str | None = None

    @property
    def is_quiz(self) -> bool:
        return self.scene_type == "quiz"

    def apply_content(self, content: SceneContent) -> None:
        """Copy a layout variant's fields onto the draft."""
        data = content.model_dump()
        self.layout = data.pop("layout")
        title = data.pop("title", None)
        if title:
            self.title = title
        for key, value in data.items():
            setattr(self, key, value)

    def bind_background(self, bg_type: str, *, gradient: str | None = None, asset: StockAsset | None = None) -> None:
        """Set the background; gradient and asset are mutually exclusive."""
        if bg_type == "gradient":
            if asset is not None:
                raise ValueError("gradient background cannot carry an asset")
            self.bg_type, self.gradient, self.asset = "gradient", gradient, None
        else:
            if asset is not None and asset.media_type != bg_type:
                raise ValueError(f"{asset.media_type} asset bound to {bg_type} background")
            self.bg_type, self.gradient, self.asset = bg_type, None, asset

    def to_model(self, project_id: int, scene_number: int) -> Scene:
        asset = self.asset
        return Scene(
            project_id=project_id,
            scene_number=scene_number,
            scene_type=self.scene_type,
            layout=self.layout,
            eyebrow=self.eyebrow,
            title=self.title,
            subtitle=self.subtitle,
            body=self.body,
            narration=self.narration,
            bullets_json=_dumps(self.bullets),
            cards_json=_dumps(self.cards),
            timeline_json=_dumps(self.timeline_items),
            icon_items_json=_dumps(self.icon_items),
            stat_value=self.stat_value,
            stat_label=self.stat_label,
            quote=self.quote,
            quote_author=self.quote_author,
            split_image=self.split_image,
            bg_type=self.bg_type,
            gradient=self.gradient,
            asset_url=asset.url if asset else None,
            asset_type=asset.media_type if asset else None,
            asset_id=asset.id if asset else None,
            asset_thumbnail=asset.thumbnail if asset else None,
            asset_keywords=self.asset_keywords,
            choice_quality=self.choice_quality,
            points=self.points,
            feedback=self.feedback,
            outcome_tier=self.outcome_tier,
            quiz_question=self.quiz_question,
            quiz_options_json=_dumps(self.quiz_options),
            quiz_correct_index=self.quiz_correct_index,
            quiz_explanation=self.quiz_explanation,
        )
