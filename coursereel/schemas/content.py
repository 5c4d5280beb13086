"""Layout content: one pydantic variant per layout, discriminated by ``layout``.

Both the generative path and the deterministic fallback build these models, so
downstream code never needs to know which producer filled a scene.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class CardItem(BaseModel):
    icon: str = ""
    title: str = Field(min_length=1)
    desc: str = Field(min_length=1)


class TimelineItem(BaseModel):
    year: str = Field(min_length=1)
    event: str = Field(min_length=1)


class _LayoutContent(BaseModel):
    title: str | None = None
    narration: str = Field(min_length=1)


class BulletsContent(_LayoutContent):
    layout: Literal["bullets"] = "bullets"
    body: str = Field(min_length=1)
    bullets: list[str] = Field(min_length=3, max_length=5)


class FullTextContent(_LayoutContent):
    layout: Literal["fulltext"] = "fulltext"
    body: str = Field(min_length=1)


class StatContent(_LayoutContent):
    layout: Literal["stat"] = "stat"
    stat_value: str = Field(min_length=1)
    stat_label: str = Field(min_length=1)


class QuoteContent(_LayoutContent):
    layout: Literal["quote"] = "quote"
    quote: str = Field(min_length=1)
    quote_author: str = Field(min_length=1)


class TwoCardContent(_LayoutContent):
    layout: Literal["cards2"] = "cards2"
    cards: list[CardItem] = Field(min_length=2, max_length=2)


class FourCardContent(_LayoutContent):
    layout: Literal["cards4"] = "cards4"
    cards: list[CardItem] = Field(min_length=4, max_length=4)


class TimelineContent(_LayoutContent):
    layout: Literal["timeline"] = "timeline"
    timeline_items: list[TimelineItem] = Field(min_length=3, max_length=4)


class IconListContent(_LayoutContent):
    layout: Literal["iconlist"] = "iconlist"
    icon_items: list[CardItem] = Field(min_length=3, max_length=4)


class SplitContent(_LayoutContent):
    """Text panel beside an image; the image is the scene's background asset."""

    layout: Literal["split", "image_left", "image_right"] = "split"
    body: str = Field(min_length=1)
    split_image: str = Field(min_length=1)  # keywords for the featured image


SceneContent = Annotated[
    Union[
        BulletsContent,
        FullTextContent,
        StatContent,
        QuoteContent,
        TwoCardContent,
        FourCardContent,
        TimelineContent,
        IconListContent,
        SplitContent,
    ],
    Field(discriminator="layout"),
]

scene_content_adapter = TypeAdapter(SceneContent)


def parse_scene_content(layout: str, payload: dict) -> SceneContent:
    """Validate a raw payload as the content variant for ``layout``.

    The layout is forced to the requested one so a generator cannot switch
    variants behind the assigner's back. Raises ``pydantic.ValidationError``.
    """
    return scene_content_adapter.validate_python({**payload, "layout": layout})
