"""Text-to-speech voice-over for generated scenes."""
import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

import httpx

from coursereel.core.config import Settings
from coursereel.core.errors import SpeechSynthesisError

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150

VOICES = [
    {"id": "pNInz6obpgDQGcFmaJgB", "name": "Adam", "desc": "Deep, authoritative", "category": "featured"},
    {"id": "EXAVITQu4vr4xnSDxMaL", "name": "Sarah", "desc": "Clear, professional", "category": "featured"},
    {"id": "VR6AewLTigWG4xSOukaG", "name": "Raj", "desc": "Warm, friendly", "category": "featured"},
    {"id": "TxGEqnHWrfWFTfGW9XjX", "name": "Josh", "desc": "Young, energetic", "category": "standard"},
    {"id": "ErXwobaYiN019PkySvjV", "name": "Antoni", "desc": "Well-rounded", "category": "standard"},
    {"id": "MF3mGyEYCl7XYWbV9V6O", "name": "Elli", "desc": "Emotional, soft", "category": "standard"},
]
VOICE_IDS = {v["id"] for v in VOICES}


@dataclass(frozen=True)
class NarrationClip:
    audio: bytes | None
    duration_ms: int

    @property
    def data_url(self) -> str | None:
        if not self.audio:
            return None
        return "data:audio/mpeg;base64," + base64.b64encode(self.audio).decode("ascii")


EMPTY_CLIP = NarrationClip(None, 0)


def estimate_duration_ms(text: str) -> int:
    words = len(text.split())
    return round(words / WORDS_PER_MINUTE * 60 * 1000)


def narration_text(scene) -> str:
    return (scene.narration or scene.body or scene.title or "").strip()


class SpeechSynthesisClient:
    """ElevenLabs text-to-speech over httpx."""

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = "https://api.elevenlabs.io/v1",
        timeout: float = 30.0,
        model_id: str = "eleven_monolingual_v1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.model_id = model_id
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "SpeechSynthesisClient":
        return cls(settings.elevenlabs_api_key, api_url=settings.elevenlabs_api_url, timeout=settings.speech_timeout_seconds)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def synthesize(self, text: str, voice_id: str) -> NarrationClip:
        if not self.is_configured:
            raise SpeechSynthesisError("Speech API key is not configured")
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.6, "similarity_boost": 0.75},
        }
        headers = {"Accept": "audio/mpeg", "xi-api-key": self.api_key}
        async def post() -> bytes:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(f"{self.api_url}/text-to-speech/{voice_id}", json=payload, headers=headers)
                r.raise_for_status()
                return r.content

        try:
            audio = await asyncio.wait_for(post(), self.timeout)
        except asyncio.TimeoutError as e:
            raise SpeechSynthesisError(f"Speech request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise SpeechSynthesisError(f"Speech request failed: {e}") from e
        if not audio:
            raise SpeechSynthesisError("Empty audio response")
        return NarrationClip(audio, estimate_duration_ms(text))


async def generate_voice_overs(
    client: SpeechSynthesisClient,
    scenes: Sequence,
    voice_id: str,
    *,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[NarrationClip]:
    """One clip per scene, in order. Requests are spaced by ``delay_seconds``."""
    clips = []
    for i, scene in enumerate(scenes):
        text = narration_text(scene)
        if not text:
            logger.info("Scene %d has no narration text, skipping", i + 1)
            clips.append(EMPTY_CLIP)
            continue
        try:
            clips.append(await client.synthesize(text, voice_id))
        except SpeechSynthesisError as e:
            logger.warning("Voice-over failed for scene %d: %s", i + 1, e)
            clips.append(EMPTY_CLIP)
        if i < len(scenes) - 1:
            await sleep(delay_seconds)
    return clips
