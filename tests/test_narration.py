"""Tests for coursereel.services.narration."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest

from coursereel.core.errors import SpeechSynthesisError
from coursereel.services.narration import (
    EMPTY_CLIP,
    NarrationClip,
    SpeechSynthesisClient,
    estimate_duration_ms,
    generate_voice_overs,
)


def _speech(handler, api_key="xi-key"):
    return SpeechSynthesisClient(api_key, api_url="https://speech.test/v1", transport=httpx.MockTransport(handler))


def _scene(narration=None, body=None, title=None):
    return SimpleNamespace(narration=narration, body=body, title=title)


class FakeSpeech:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.texts = []

    async def synthesize(self, text, voice_id):
        self.texts.append(text)
        if text in self.fail_on:
            raise SpeechSynthesisError("quota exceeded")
        return NarrationClip(b"mp3", estimate_duration_ms(text))


class TestSpeechSynthesisClient:
    async def test_synthesize(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers["xi-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"ID3audio")

        clip = await _speech(handler).synthesize("one two three", "voice-1")

        assert clip.audio == b"ID3audio"
        assert clip.duration_ms == 1200
        assert clip.data_url.startswith("data:audio/mpeg;base64,")
        assert seen["url"] == "https://speech.test/v1/text-to-speech/voice-1"
        assert seen["key"] == "xi-key"
        assert seen["body"]["text"] == "one two three"

    async def test_http_error(self):
        with pytest.raises(SpeechSynthesisError):
            await _speech(lambda request: httpx.Response(401)).synthesize("hi", "v")

    async def test_slow_response_times_out(self):
        async def trickle(request):
            await asyncio.sleep(5)
            return httpx.Response(200, content=b"ID3")

        client = SpeechSynthesisClient(
            "xi-key", api_url="https://speech.test/v1", timeout=0.05, transport=httpx.MockTransport(trickle),
        )
        with pytest.raises(SpeechSynthesisError, match="timed out"):
            await client.synthesize("hi", "v")

    async def test_not_configured(self):
        with pytest.raises(SpeechSynthesisError):
            await _speech(lambda request: httpx.Response(200, content=b"x"), api_key="").synthesize("hi", "v")


class TestGenerateVoiceOvers:
    async def test_sequential_with_delay(self):
        speech = FakeSpeech()
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        scenes = [_scene(narration="Welcome"), _scene(body="Body text"), _scene(title="Title only")]
        clips = await generate_voice_overs(speech, scenes, "v", delay_seconds=1.5, sleep=fake_sleep)

        assert speech.texts == ["Welcome", "Body text", "Title only"]
        assert len(clips) == 3
        assert sleeps == [1.5, 1.5]

    async def test_failures_and_blank_scenes_yield_empty_clips(self):
        speech = FakeSpeech(fail_on={"boom"})

        async def no_sleep(seconds):
            pass

        clips = await generate_voice_overs(speech, [_scene(), _scene(narration="boom"), _scene(narration="ok")], "v", sleep=no_sleep)

        assert clips[0] == EMPTY_CLIP
        assert clips[1] == EMPTY_CLIP
        assert clips[2].audio == b"mp3"
        assert speech.texts == ["boom", "ok"]


def test_duration_estimate():
    assert estimate_duration_ms("word " * 150) == 60_000
    assert estimate_duration_ms("") == 0
