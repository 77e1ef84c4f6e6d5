"""
AI Service - LLM integration for flashcard content generation.

Provides abstraction over multiple LLM providers (OpenAI-compatible APIs,
Anthropic, local Ollama models) for the text stages of the pipeline:
- Translation and definition
- Example sentences in the requested tone
"""

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import aiohttp

from ..config import Config, language_name
from ..errors import GenerationError
from ..models import FlashcardSettings, TranslationDirection
from ..utils.parsing import TextParser

logger = logging.getLogger(__name__)


class AIProvider(Enum):
    """Supported AI providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"  # Local models
    GROQ = "groq"  # Fast inference, OpenAI-compatible


MODEL_DEFAULTS = {
    AIProvider.OPENAI: "gpt-4o-mini",
    AIProvider.ANTHROPIC: "claude-3-haiku-20240307",
    AIProvider.OLLAMA: "llama3.2",
    AIProvider.GROQ: "llama-3.1-8b-instant",
}

API_KEY_ENV = {
    AIProvider.OPENAI: "OPENAI_API_KEY",
    AIProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    AIProvider.GROQ: "GROQ_API_KEY",
}


@dataclass
class AIConfig:
    """Configuration for AI service."""
    provider: AIProvider = AIProvider.OPENAI
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 400
    timeout: int = Config.TIMEOUT
    retries: int = Config.RETRIES


class TransientAIError(GenerationError):
    """Provider failure worth retrying (timeouts, rate limits, 5xx)."""


class BaseAIProvider(ABC):
    """Abstract base class for AI providers."""

    def __init__(self, config: AIConfig):
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _post_json(self, url: str, payload: Dict, headers: Optional[Dict] = None) -> Dict:
        """POST a JSON payload and return the decoded reply, raising on failure."""
        session = await self._get_session()
        name = type(self).__name__.replace("Provider", "")
        try:
            async with session.post(url, headers=headers, json=payload) as response:
                if response.status == 200:
                    return await response.json()
                error = await response.text()
                message = f"{name} API error {response.status}: {error[:200]}"
                if response.status == 429 or response.status >= 500:
                    raise TransientAIError(message)
                raise GenerationError(message)
        except asyncio.TimeoutError:
            raise TransientAIError(f"{name} API timeout")
        except aiohttp.ClientConnectorError:
            raise TransientAIError(f"Cannot connect to {name} at {url}")

    @abstractmethod
    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate completion for the given prompt."""
        pass


class OpenAIProvider(BaseAIProvider):
    """OpenAI API provider (also works with compatible APIs such as Groq)."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        base_url = self.config.base_url or self.DEFAULT_BASE_URL

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        data = await self._post_json(f"{base_url}/chat/completions", payload, headers)
        return data["choices"][0]["message"]["content"]


class GroqProvider(OpenAIProvider):
    """Groq fast inference provider."""

    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"


class AnthropicProvider(BaseAIProvider):
    """Anthropic Claude API provider."""

    BASE_URL = "https://api.anthropic.com/v1"

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        data = await self._post_json(f"{self.config.base_url or self.BASE_URL}/messages", payload, headers)
        return data["content"][0]["text"]


class OllamaProvider(BaseAIProvider):
    """Ollama local model provider."""

    DEFAULT_BASE_URL = "http://localhost:11434"

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        base_url = self.config.base_url or self.DEFAULT_BASE_URL
        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
        payload = {
            "model": self.config.model,
            "prompt": full_prompt,
            "stream": False,
            "options": {"temperature": self.config.temperature},
        }
        data = await self._post_json(f"{base_url}/api/generate", payload)
        return data.get("response", "")


PROVIDER_CLASSES = {
    AIProvider.OPENAI: OpenAIProvider,
    AIProvider.ANTHROPIC: AnthropicProvider,
    AIProvider.OLLAMA: OllamaProvider,
    AIProvider.GROQ: GroqProvider,
}


class AIService:
    """
    High-level AI service for flashcard content generation.

    Unlike a best-effort enhancer, every method here raises GenerationError
    when the model fails or replies with nothing usable: a failed stage must
    fail the word.
    """

    SYSTEM_PROMPTS = {
        "translation": """You are a translator and lexicographer building vocabulary flashcards.
Rules:
- Translate the single word or short phrase you are given
- Write a short dictionary-style definition (one sentence)
- Reply with a JSON object: {"translation": "...", "definition": "..."}
- Return ONLY the JSON object""",

        "sentence": """You are a language learning expert creating example sentences for vocabulary flashcards.
Rules:
- Create one natural sentence a native speaker would actually say
- Use the given word in a clear, memorable context
- Follow the requested tone
- Return ONLY the sentence, no numbering, no translation""",
    }

    JSON_OBJECT_PATTERN = re.compile(r'\{.*\}', re.DOTALL)

    def __init__(self, config: Optional[AIConfig] = None, provider: Optional[BaseAIProvider] = None):
        """
        Initialize AI service.

        Args:
            config: AI configuration. If None, uses environment variables.
            provider: Ready-made provider, mainly for tests
        """
        self.config = config or self._config_from_env()
        self._provider: Optional[BaseAIProvider] = provider

    @staticmethod
    def _config_from_env() -> AIConfig:
        """Create config from environment variables."""
        try:
            provider = AIProvider(os.environ.get("AI_PROVIDER", "openai").lower())
        except ValueError:
            provider = AIProvider.OPENAI

        return AIConfig(
            provider=provider,
            model=os.environ.get("AI_MODEL", MODEL_DEFAULTS[provider]),
            api_key=os.environ.get(API_KEY_ENV.get(provider, ""), None),
            base_url=os.environ.get("AI_BASE_URL"),
            temperature=float(os.environ.get("AI_TEMPERATURE", "0.7")),
        )

    def _get_provider(self) -> BaseAIProvider:
        """Get or create the appropriate provider."""
        if self._provider is None:
            provider_class = PROVIDER_CLASSES.get(self.config.provider, OpenAIProvider)
            self._provider = provider_class(self.config)
        return self._provider

    async def close(self) -> None:
        """Close the AI service and release resources."""
        if self._provider:
            await self._provider.close()
            self._provider = None

    @property
    def is_configured(self) -> bool:
        """Check if AI service is properly configured."""
        if self.config.provider == AIProvider.OLLAMA:
            return True  # Ollama doesn't need API key
        return bool(self.config.api_key)

    async def _complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Run a completion, retrying transient failures with exponential backoff."""
        provider = self._get_provider()
        attempts = max(1, self.config.retries)
        for attempt in range(attempts):
            try:
                return await provider.complete(prompt, system_prompt)
            except TransientAIError as e:
                if attempt + 1 >= attempts:
                    raise
                delay = min(10.0, 0.5 * (2 ** min(attempt, 4)))
                logger.warning("%s, retrying in %.1fs (%d/%d)", e, delay, attempt + 1, attempts - 1)
                await asyncio.sleep(delay)

    def _parse_json(self, reply: str) -> Dict[str, str]:
        match = self.JSON_OBJECT_PATTERN.search(reply or "")
        if not match:
            raise GenerationError(f"Model reply is not JSON: {str(reply)[:100]}")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise GenerationError(f"Model reply is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise GenerationError("Model reply is not a JSON object")
        return data

    async def translate_and_define(self, word: str, settings: FlashcardSettings) -> Dict[str, str]:
        """
        Translate a word and define it.

        For source-to-target the word is translated into the target language;
        for target-to-source it is read as target-language text and translated
        into the source language. The definition is always written in the
        source language.

        Args:
            word: The user's input
            settings: Settings snapshot for this word

        Returns:
            {"translation": str, "definition": str}, both non-empty
        """
        source = language_name(settings.source_language)
        target = language_name(settings.target_language)
        if settings.translation_direction == TranslationDirection.SOURCE_TO_TARGET:
            from_lang, to_lang = source, target
        else:
            from_lang, to_lang = target, source

        prompt = f"""Translate the {from_lang} word "{word}" into {to_lang}.
Then define "{word}" in {source}.
Tone: {settings.tone}"""

        data = self._parse_json(await self._complete(prompt, self.SYSTEM_PROMPTS["translation"]))
        translation = TextParser.clean_reply(data.get("translation", ""))
        definition = TextParser.normalize_unicode(str(data.get("definition", "")).strip())
        if not translation or not definition:
            raise GenerationError(f"Model returned no translation or definition for '{word}'")
        return {"translation": translation, "definition": definition}

    async def generate_example_sentence(
        self,
        word: str,
        settings: FlashcardSettings,
        avoid: Optional[str] = None
    ) -> str:
        """
        Generate one example sentence in the target language.

        Args:
            word: Target-language word to use
            settings: Settings snapshot (language and tone)
            avoid: A previous sentence the new one must differ from

        Returns:
            The sentence
        """
        target = language_name(settings.target_language)
        prompt = f"""Write one example sentence in {target} using the word "{word}".
Tone: {settings.tone}"""
        if avoid:
            prompt += f"\nShow a different usage than: {avoid}"

        reply = await self._complete(prompt, self.SYSTEM_PROMPTS["sentence"])
        sentence = TextParser.clean_reply(reply)
        if not sentence:
            raise GenerationError(f"Model returned no example sentence for '{word}'")
        return sentence
