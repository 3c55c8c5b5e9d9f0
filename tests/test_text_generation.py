"""
Text Generation Client Tests
tests/test_text_generation.py
"""

import asyncio
import json

import httpx
import pytest
from pydantic import SecretStr

from nexus_engine.core.exceptions import TextGenerationException
from nexus_engine.services.text_generation import (
    OFFLINE_LABEL,
    CapabilitiesResponse,
    FeedResponse,
    OfflineTextGenerator,
    Prompt,
    TextGenerationClient,
    build_text_generator,
    parse_structured,
    strip_fences,
)

CAPABILITIES_JSON = {
    "greeting": "Hello",
    "capabilities": [{"title": "Reports", "description": "Blueprints", "prompt": "Analyze Cebu"}],
}


@pytest.fixture
def live_settings(settings):
    return settings.model_copy(update={"OPENAI_API_KEY": SecretStr("test-key")})


def chat_response(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def make_client(settings, handler):
    return TextGenerationClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


PROMPT = Prompt(persona="Analyst", directives=["Summarise"], context={"headline": "RCI 70/100"})
JSON_PROMPT = Prompt(persona="Analyst", directives=["List capabilities"], schema_name="capabilities")


class TestParsing:
    """Tests for defensive response parsing."""

    def test_strip_fences(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_fences('  {"a": 1} ') == '{"a": 1}'

    def test_parse_fenced_capabilities(self):
        parsed = parse_structured("```json\n" + json.dumps(CAPABILITIES_JSON) + "\n```", "capabilities")
        assert isinstance(parsed, CapabilitiesResponse)
        assert parsed.capabilities[0].title == "Reports"

    def test_invalid_json_raises(self):
        with pytest.raises(TextGenerationException, match="not valid JSON"):
            parse_structured("Sure! Here you go", "capabilities")

    def test_wrong_shape_raises(self):
        with pytest.raises(TextGenerationException, match="does not match"):
            parse_structured('{"feed": [{"id": "1", "timestamp": "now", "type": "rumour"}]}', "feed")

    def test_unknown_shape_raises(self):
        with pytest.raises(TextGenerationException, match="Unknown response shape"):
            parse_structured("{}", "weather")

    def test_prompt_messages(self):
        messages = JSON_PROMPT.to_messages()
        assert messages[0] == {"role": "system", "content": "Analyst"}
        assert "'capabilities' shape" in messages[1]["content"]


class TestTextGenerationClient:
    """Tests for the live client against a mock transport."""

    def test_requires_api_key(self, settings):
        with pytest.raises(TextGenerationException):
            TextGenerationClient(settings)

    def test_generate_text(self, live_settings):
        captured = {}

        def handler(request):
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return chat_response("  Cebu is well placed.  ")

        text = asyncio.run(make_client(live_settings, handler).generate_text(PROMPT, 500))
        assert text == "Cebu is well placed."
        assert captured["auth"] == "Bearer test-key"
        assert captured["body"]["max_tokens"] == 500
        assert "response_format" not in captured["body"]

    def test_generate_json(self, live_settings):
        def handler(request):
            assert json.loads(request.content)["response_format"] == {"type": "json_object"}
            return chat_response(json.dumps(CAPABILITIES_JSON))

        result = asyncio.run(make_client(live_settings, handler).generate_json(JSON_PROMPT, 500))
        assert result.greeting == "Hello"

    def test_generate_json_requires_schema(self, live_settings):
        client = make_client(live_settings, lambda request: chat_response("{}"))
        with pytest.raises(TextGenerationException):
            asyncio.run(client.generate_json(PROMPT, 100))

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(200, json={"choices": []}),
            httpx.Response(200, text="not json"),
        ],
    )
    def test_bad_responses_raise(self, live_settings, response):
        client = make_client(live_settings, lambda request: response)
        with pytest.raises(TextGenerationException):
            asyncio.run(client.generate_text(PROMPT, 100))

    def test_stream_text(self, live_settings):
        chunks = [
            {"choices": [{"delta": {"content": "Regional "}}]},
            {"choices": [{"delta": {}}]},
            {"choices": [{"delta": {"content": "outlook"}}]},
        ]
        body = "".join(f"data: {json.dumps(c)}\n\n" for c in chunks) + "data: [DONE]\n\n"

        def handler(request):
            assert json.loads(request.content)["stream"] is True
            return httpx.Response(200, text=body, headers={"content-type": "text/event-stream"})

        async def collect():
            client = make_client(live_settings, handler)
            return [delta async for delta in client.stream_text(PROMPT, 100)]

        assert asyncio.run(collect()) == ["Regional ", "outlook"]


class TestOfflineTextGenerator:
    """Tests for the labelled fallback."""

    def test_text_is_labelled(self):
        text = asyncio.run(OfflineTextGenerator().generate_text(PROMPT, 100))
        assert text.startswith(OFFLINE_LABEL)
        assert "RCI 70/100" in text

    def test_stream_yields_labelled_text_once(self):
        async def collect():
            return [chunk async for chunk in OfflineTextGenerator().stream_text(PROMPT, 100)]

        chunks = asyncio.run(collect())
        assert len(chunks) == 1
        assert chunks[0].startswith(OFFLINE_LABEL)

    def test_json_shapes(self):
        generator = OfflineTextGenerator()
        capabilities = asyncio.run(generator.generate_json(JSON_PROMPT, 100))
        assert len(capabilities.capabilities) == 3
        feed = asyncio.run(generator.generate_json(Prompt("Analyst", [], schema_name="feed"), 100))
        assert feed == FeedResponse(feed=[])

    def test_build_without_key_is_offline(self, settings, live_settings):
        assert build_text_generator(settings).offline is True
        assert build_text_generator(live_settings).offline is False
