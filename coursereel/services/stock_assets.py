"""Stock media search and per-run asset deduplication."""
import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any

import httpx

from coursereel.core.config import Settings
from coursereel.core.errors import StockMediaError

logger = logging.getLogger(__name__)

ASSET_MEDIA = ("image", "video")
DEFAULT_KEYWORDS = "business professional"


@dataclass(frozen=True)
class StockAsset:
    id: str
    url: str
    media_type: str  # image | video
    thumbnail: str | None = None
    source: str = "stock"  # stock | fallback


def _photo(id_: int) -> StockAsset:
    base = f"https://images.pexels.com/photos/{id_}/pexels-photo-{id_}.jpeg"
    return StockAsset(
        id=f"static-{id_}",
        url=f"{base}?auto=compress&cs=tinysrgb&w=1920",
        media_type="image",
        thumbnail=f"{base}?auto=compress&cs=tinysrgb&w=350",
        source="fallback",
    )


# Curated stand-ins used when search fails or every candidate was already used.
CURATED_ASSETS: dict[str, tuple[StockAsset, ...]] = {
    "image": tuple(_photo(i) for i in (3184292, 3184465, 1181406, 3182812, 3183150)),
    "video": (),
}


class PexelsClient:
    """Keyword search against the Pexels photo and video endpoints."""

    def __init__(
        self,
        api_key: str,
        *,
        photo_url: str = "https://api.pexels.com/v1/search",
        video_url: str = "https://api.pexels.com/videos/search",
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.photo_url = photo_url
        self.video_url = video_url
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "PexelsClient":
        return cls(
            settings.pexels_api_key,
            photo_url=settings.pexels_photo_url,
            video_url=settings.pexels_video_url,
            timeout=settings.stock_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, keywords: str, media_type: str, per_page: int = 10) -> list[StockAsset]:
        """Return one page of candidates in ranking order, or raise StockMediaError."""
        if media_type not in ASSET_MEDIA:
            raise ValueError(f"unsupported media type: {media_type}")
        if not self.is_configured:
            raise StockMediaError("Stock media API key is not configured")

        url = self.photo_url if media_type == "image" else self.video_url
        params = {"query": keywords or DEFAULT_KEYWORDS, "per_page": per_page, "orientation": "landscape"}
        async def fetch() -> Any:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(url, params=params, headers={"Authorization": self.api_key})
                r.raise_for_status()
                return r.json()

        try:
            data = await asyncio.wait_for(fetch(), self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise StockMediaError(f"Stock media search timed out after {self.timeout}s") from e
        except (httpx.HTTPError, ValueError) as e:
            raise StockMediaError(f"Stock media search failed: {e}") from e

        try:
            if media_type == "image":
                return [_parse_photo(p) for p in data.get("photos") or []]
            return [a for a in (_parse_video(v) for v in data.get("videos") or []) if a is not None]
        except (KeyError, TypeError, AttributeError) as e:
            raise StockMediaError("Unexpected response shape from stock media API") from e


def _parse_photo(photo: dict[str, Any]) -> StockAsset:
    src = photo["src"]
    return StockAsset(
        id=str(photo["id"]),
        url=src.get("large2x") or src["original"],
        media_type="image",
        thumbnail=src.get("medium"),
    )


def _parse_video(video: dict[str, Any]) -> StockAsset | None:
    files = video.get("video_files") or []
    if not files:
        return None
    hd = (
        next((f for f in files if f.get("width") == 1920 and f.get("height") == 1080), None)
        or next((f for f in files if f.get("quality") == "hd"), None)
        or files[0]
    )
    return StockAsset(id=str(video["id"]), url=hd["link"], media_type="video", thumbnail=video.get("image"))


@dataclass
class AssetUsage:
    """Asset ids already bound during one generation run. Create one per run."""

    image_ids: set[str] = field(default_factory=set)
    video_ids: set[str] = field(default_factory=set)

    def ids_for(self, media_type: str) -> set[str]:
        if media_type == "image":
            return self.image_ids
        if media_type == "video":
            return self.video_ids
        raise ValueError(f"unsupported media type: {media_type}")


class StockAssetResolver:
    """Bind a background asset to a scene without repeating assets inside a run.

    A failed or exhausted search degrades to a curated static asset, then to
    ``None``; neither is an error for the caller.
    """

    def __init__(
        self,
        client,
        usage: AssetUsage,
        *,
        rng: random.Random | None = None,
        top_n: int = 3,
        page_size: int = 10,
        curated: dict[str, tuple[StockAsset, ...]] | None = None,
    ) -> None:
        self.client = client
        self.usage = usage
        self.rng = rng or random.Random()
        self.top_n = max(1, top_n)
        self.page_size = page_size
        self.curated = CURATED_ASSETS if curated is None else curated
        self._fallback_cursor = {m: 0 for m in ASSET_MEDIA}

    async def resolve(self, keywords: str | None, media_type: str) -> StockAsset | None:
        if media_type not in ASSET_MEDIA:
            raise ValueError(f"no stock asset for background medium {media_type!r}")
        query = (keywords or "").strip() or DEFAULT_KEYWORDS

        try:
            candidates = await self.client.search(query, media_type, self.page_size)
        except StockMediaError as e:
            logger.warning("Stock %s search failed for %r: %s", media_type, query, e)
            return self._fallback(media_type)

        used = self.usage.ids_for(media_type)
        available = [c for c in candidates if c.id not in used]
        if not available:
            logger.info("No unused stock %s for %r (%d candidates)", media_type, query, len(candidates))
            return self._fallback(media_type)

        chosen = self.rng.choice(available[: self.top_n])
        used.add(chosen.id)
        return chosen

    def _fallback(self, media_type: str) -> StockAsset | None:
        pool = self.curated.get(media_type) or ()
        if not pool:
            return None
        asset = pool[self._fallback_cursor[media_type] % len(pool)]
        self._fallback_cursor[media_type] += 1
        return asset
