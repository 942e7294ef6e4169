"""Tests for AI copy service with a scripted provider."""

import random
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from zyra.ai.prompts import DEFAULT_VOICE, description_prompt, resolve_voice
from zyra.ai.provider import OpenAIProvider, TextProvider
from zyra.ai.service import AIService
from zyra.common.config import ZyraSettings
from zyra.common.exceptions import ServiceUnavailableError, UpstreamServiceError, ValidationError
from zyra.store.memory import MemoryStore
from zyra.usage.service import UsageService


class ScriptedProvider(TextProvider):
    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def complete_json(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def _usage() -> UsageService:
    return UsageService(ZyraSettings(storage_backend="memory"), MemoryStore(), rng=random.Random(0))


class TestPrompts:
    def test_unknown_voice_falls_back(self):
        assert resolve_voice("pirate") == DEFAULT_VOICE
        assert resolve_voice(None) == DEFAULT_VOICE

    def test_description_prompt_mentions_product(self):
        prompt = description_prompt("Desk Lamp", "home", "dimmable", "students", "luxury")
        assert "Desk Lamp" in prompt
        assert "JSON" in prompt


class TestGenerateDescription:
    async def test_success_meters_usage(self):
        usage = _usage()
        svc = AIService(ScriptedProvider({"description": "  Bright and warm.  "}), usage=usage)
        text = await svc.generate_description("u1", "Desk Lamp", brand_voice="eco")
        assert text == "Bright and warm."

        stats = await usage.get_usage_stats("u1")
        assert stats.ai_generations_used == 1
        entries = await usage.store.list_activity("u1")
        assert entries[0].action == "ai_generation"
        assert entries[0].tool_used == "ai-generator"

    async def test_blank_name_rejected_without_calling_provider(self):
        provider = ScriptedProvider()
        svc = AIService(provider, usage=_usage())
        with pytest.raises(ValidationError):
            await svc.generate_description("u1", "   ")
        assert provider.prompts == []

    async def test_missing_description_is_upstream_error(self):
        usage = _usage()
        svc = AIService(ScriptedProvider({"text": "wrong key"}), usage=usage)
        with pytest.raises(UpstreamServiceError):
            await svc.generate_description("u1", "Lamp")
        assert await usage.get_usage_stats("u1") is None

    async def test_provider_failure_does_not_meter(self):
        usage = _usage()
        failure = UpstreamServiceError("boom", service="openai")
        svc = AIService(ScriptedProvider(failure), usage=usage)
        with pytest.raises(UpstreamServiceError):
            await svc.generate_description("u1", "Lamp")
        assert await usage.store.list_activity("u1") == []


class TestOptimizeSEO:
    async def test_normalizes_reply(self):
        usage = _usage()
        svc = AIService(ScriptedProvider({
            "optimizedTitle": "Best Lamp",
            "optimizedMeta": "A lamp.",
            "keywords": "lamp, desk lamp, ",
            "seoScore": 140,
        }), usage=usage)
        result = await svc.optimize_seo("u1", "lamp", "lamp, light")
        assert result.keywords == ["lamp", "desk lamp"]
        assert result.seo_score == 100
        stats = await usage.get_usage_stats("u1")
        assert stats.seo_optimizations_used == 1

    async def test_requires_title_and_keywords(self):
        svc = AIService(ScriptedProvider(), usage=_usage())
        with pytest.raises(ValidationError):
            await svc.optimize_seo("u1", "lamp", "")

    async def test_bad_score_becomes_zero(self):
        svc = AIService(ScriptedProvider({"optimizedTitle": "T", "seoScore": "n/a"}))
        result = await svc.optimize_seo("u1", "lamp", "lamp")
        assert result.seo_score == 0


class _FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestOpenAIProvider:
    async def test_not_configured(self):
        provider = OpenAIProvider(ZyraSettings(openai_api_key=""))
        with pytest.raises(ServiceUnavailableError):
            await provider.complete_json("hi")

    async def test_requests_json_object(self):
        completions = _FakeCompletions('{"description": "ok"}')
        provider = OpenAIProvider(ZyraSettings(openai_model="gpt-test"), client=_client(completions))
        assert await provider.complete_json("hi") == {"description": "ok"}
        assert completions.calls[0]["model"] == "gpt-test"
        assert completions.calls[0]["response_format"] == {"type": "json_object"}

    async def test_malformed_json(self):
        provider = OpenAIProvider(ZyraSettings(), client=_client(_FakeCompletions("not json")))
        with pytest.raises(UpstreamServiceError):
            await provider.complete_json("hi")

    async def test_sdk_error_wrapped(self):
        completions = _FakeCompletions(error=OpenAIError("down"))
        provider = OpenAIProvider(ZyraSettings(), client=_client(completions))
        with pytest.raises(UpstreamServiceError) as exc_info:
            await provider.complete_json("hi")
        assert exc_info.value.service == "openai"
