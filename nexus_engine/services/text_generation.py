"""
Text Generation Service - Nexus Intelligence Engine
nexus_engine/services/text_generation.py

Client for an OpenAI-compatible /chat/completions endpoint, used only for
narrative filler and small JSON payloads. Responses are untrusted: JSON
bodies are fence-stripped, parsed and validated against a declared shape
before anything downstream sees them.

OfflineTextGenerator is the labelled fallback used when no API key is
configured or the live service fails during report assembly.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Type

import httpx
from pydantic import BaseModel, Field, ValidationError

from nexus_engine.config import Settings, get_settings
from nexus_engine.core.exceptions import TextGenerationException

logger = logging.getLogger(__name__)

OFFLINE_LABEL = "[Offline mode: narrative generated without the text-generation service]"

NEXUS_PERSONA = (
    "You are Nexus Inquire, the analyst voice of a strategic intelligence platform "
    "for regional economic development. Write for government officials and business "
    "strategists: concrete, evidence-led, no marketing language."
)


# =============================================================================
# Declared response shapes
# =============================================================================

class Capability(BaseModel):
    title: str
    description: str
    prompt: str


class CapabilitiesResponse(BaseModel):
    greeting: str
    capabilities: List[Capability] = Field(default_factory=list)


class FeedItem(BaseModel):
    id: str
    timestamp: str
    type: str = Field(..., pattern="^(opportunity|news|indicator)$")
    content: Dict[str, Any] = Field(default_factory=dict)


class FeedResponse(BaseModel):
    feed: List[FeedItem] = Field(default_factory=list)


RESPONSE_SHAPES: Dict[str, Type[BaseModel]] = {
    "capabilities": CapabilitiesResponse,
    "feed": FeedResponse,
}


@dataclass
class Prompt:
    """Structured prompt: persona, directives, expected shape and facts."""
    persona: str
    directives: List[str]
    schema_name: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_messages(self) -> List[Dict[str, str]]:
        lines = [f"- {d}" for d in self.directives]
        if self.context:
            lines.append("Context (JSON):")
            lines.append(json.dumps(self.context, default=str, sort_keys=True))
        if self.schema_name:
            lines.append(
                f"Respond with a single valid JSON object matching the '{self.schema_name}' "
                "shape. Do not include markdown fences."
            )
        return [
            {"role": "system", "content": self.persona},
            {"role": "user", "content": "\n".join(lines)},
        ]


_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    match = _FENCE_RE.match(text or "")
    return match.group(1).strip() if match else (text or "").strip()


def parse_structured(text: str, schema_name: str) -> BaseModel:
    """
    Parse and validate a JSON response against a declared shape.

    Raises:
        TextGenerationException: unknown shape, invalid JSON or shape mismatch
    """
    shape = RESPONSE_SHAPES.get(schema_name)
    if shape is None:
        raise TextGenerationException(f"Unknown response shape: {schema_name}")
    try:
        data = json.loads(strip_fences(text))
    except json.JSONDecodeError as e:
        raise TextGenerationException(f"Response is not valid JSON: {e.msg}") from e
    try:
        return shape.model_validate(data)
    except ValidationError as e:
        raise TextGenerationException(
            f"Response does not match '{schema_name}': {e.error_count()} validation errors"
        ) from e


class TextGenerator(Protocol):
    offline: bool

    async def generate_text(self, prompt: Prompt, max_tokens: int) -> str:
        ...

    async def generate_json(self, prompt: Prompt, max_tokens: int) -> BaseModel:
        ...

    def stream_text(self, prompt: Prompt, max_tokens: int) -> AsyncIterator[str]:
        ...


# =============================================================================
# Live client
# =============================================================================

class TextGenerationClient:
    """Async OpenAI-compatible chat completions client."""

    offline = False

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        if not self.settings.llm_enabled:
            raise TextGenerationException("OPENAI_API_KEY is not configured")
        self._client = client
        self.url = f"{self.settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
        self.headers = {
            "Authorization": f"Bearer {self.settings.OPENAI_API_KEY.get_secret_value()}",
            "Content-Type": "application/json",
        }

    def _body(self, prompt: Prompt, max_tokens: int, stream: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.settings.DEFAULT_LLM_MODEL,
            "messages": prompt.to_messages(),
            "max_tokens": max_tokens,
            "temperature": self.settings.LLM_TEMPERATURE,
        }
        if prompt.schema_name:
            body["response_format"] = {"type": "json_object"}
        if stream:
            body["stream"] = True
        return body

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.LLM_TIMEOUT_SECONDS)

    async def _complete(self, prompt: Prompt, max_tokens: int) -> str:
        async def post(client: httpx.AsyncClient) -> httpx.Response:
            return await client.post(
                self.url, json=self._body(prompt, max_tokens), headers=self.headers
            )

        try:
            if self._client is not None:
                response = await post(self._client)
            else:
                async with self._new_client() as client:
                    response = await post(client)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise TextGenerationException(
                f"Text generation API error {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TextGenerationException(f"Text generation request failed: {e}") from e
        except ValueError as e:
            raise TextGenerationException("Text generation returned invalid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise TextGenerationException("Text generation response has no message content") from e
        if not isinstance(content, str):
            raise TextGenerationException("Text generation message content is not text")
        return content

    async def generate_text(self, prompt: Prompt, max_tokens: int) -> str:
        text = await self._complete(prompt, max_tokens)
        logger.info(f"Generated {len(text)} characters of narrative")
        return text.strip()

    async def generate_json(self, prompt: Prompt, max_tokens: int) -> BaseModel:
        if not prompt.schema_name:
            raise TextGenerationException("generate_json requires a schema_name")
        text = await self._complete(prompt, max_tokens)
        return parse_structured(text, prompt.schema_name)

    async def stream_text(self, prompt: Prompt, max_tokens: int) -> AsyncIterator[str]:
        """
        Yield text deltas from a server-sent-events completion stream.

        Raises:
            TextGenerationException: on HTTP or transport failure
        """
        client = self._client or self._new_client()
        try:
            async with client.stream(
                "POST",
                self.url,
                json=self._body(prompt, max_tokens, stream=True),
                headers=self.headers,
            ) as response:
                if response.status_code >= 400:
                    raise TextGenerationException(
                        f"Text generation API error {response.status_code}"
                    )
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    payload = line[len("data:"):].strip()
                    if payload == "[DONE]":
                        break
                    try:
                        delta = json.loads(payload)["choices"][0]["delta"].get("content")
                    except (json.JSONDecodeError, KeyError, IndexError, TypeError, AttributeError):
                        logger.debug(f"Skipping malformed stream chunk: {payload[:80]}")
                        continue
                    if delta:
                        yield delta
        except httpx.HTTPError as e:
            raise TextGenerationException(f"Text generation stream failed: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()


# =============================================================================
# Offline fallback
# =============================================================================

DEFAULT_CAPABILITIES = CapabilitiesResponse(
    greeting="Hello, I am the Nexus Inquire assistant. The live language service is offline.",
    capabilities=[
        Capability(
            title="Strategic Intelligence Reports",
            description="Generate intelligence blueprints for regional development opportunities",
            prompt="I need to analyze investment opportunities in Southeast Asia for manufacturing partnerships.",
        ),
        Capability(
            title="Partner Matching",
            description="Identify potential partners for your regional development goals",
            prompt="Find technology partners in Vietnam for digital infrastructure development.",
        ),
        Capability(
            title="Market Research & Analysis",
            description="Analyze market opportunities and competitive landscapes",
            prompt="Analyze the renewable energy market in the Philippines.",
        ),
    ],
)


class OfflineTextGenerator:
    """Deterministic, clearly labelled stand-in for the live service."""

    offline = True

    async def generate_text(self, prompt: Prompt, max_tokens: int) -> str:
        facts = prompt.context.get("headline") or prompt.context.get("objective") or ""
        summary = f" {facts}" if facts else ""
        return f"{OFFLINE_LABEL}{summary}"

    async def generate_json(self, prompt: Prompt, max_tokens: int) -> BaseModel:
        if prompt.schema_name == "capabilities":
            return DEFAULT_CAPABILITIES.model_copy(deep=True)
        if prompt.schema_name == "feed":
            return FeedResponse(feed=[])
        raise TextGenerationException(f"Unknown response shape: {prompt.schema_name}")

    async def stream_text(self, prompt: Prompt, max_tokens: int) -> AsyncIterator[str]:
        yield await self.generate_text(prompt, max_tokens)


def build_text_generator(settings: Optional[Settings] = None) -> TextGenerator:
    """Live client when an API key is configured, offline generator otherwise."""
    settings = settings or get_settings()
    if settings.llm_enabled:
        return TextGenerationClient(settings)
    logger.info("OPENAI_API_KEY not set; using offline text generator")
    return OfflineTextGenerator()
