"""
LLM Client Abstraction

Provides unified interface for Groq, OpenAI and Anthropic chat completions.
Handles provider switching and fallback.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


# Fallback order after the primary provider
PROVIDER_ORDER = [LLMProvider.GROQ, LLMProvider.OPENAI, LLMProvider.ANTHROPIC]


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: LLMProvider
    groq_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.1-8b-instant"
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-haiku-20240307"
    max_tokens: int = 200
    temperature: float = 0.3

    def api_key_for(self, provider: LLMProvider) -> Optional[str]:
        return {
            LLMProvider.GROQ: self.groq_api_key,
            LLMProvider.OPENAI: self.openai_api_key,
            LLMProvider.ANTHROPIC: self.anthropic_api_key,
        }[provider]


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict = field(default_factory=dict)


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a single completion."""
        pass


class OpenAIClient(BaseLLMClient):
    """OpenAI chat completions client implementation."""

    provider = LLMProvider.OPENAI

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    @property
    def model(self) -> str:
        return self.config.openai_model

    def _create_client(self):
        import openai

        return openai.AsyncOpenAI(api_key=self.config.openai_api_key)

    def _get_client(self):
        """Lazy initialization of the SDK client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    async def generate(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using the chat completions API."""
        client = self._get_client()

        temp = temperature if temperature is not None else self.config.temperature
        tokens = max_tokens if max_tokens is not None else self.config.max_tokens

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temp,
                max_tokens=tokens,
            )
        except Exception as e:
            logger.error(f"{self.provider.value} API error: {e}")
            raise

        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        content = response.choices[0].message.content if response.choices else None

        return LLMResponse(
            content=content or "",
            model=self.model,
            provider=self.provider,
            usage=usage,
        )


class GroqClient(OpenAIClient):
    """Groq client, served through Groq's OpenAI-compatible endpoint."""

    provider = LLMProvider.GROQ

    @property
    def model(self) -> str:
        return self.config.groq_model

    def _create_client(self):
        import openai

        return openai.AsyncOpenAI(
            api_key=self.config.groq_api_key,
            base_url=self.config.groq_base_url,
        )


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client implementation."""

    provider = LLMProvider.ANTHROPIC

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self.config.anthropic_api_key)
        return self._client

    async def generate(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate response using Claude."""
        client = self._get_client()
        model = self.config.anthropic_model

        temp = temperature if temperature is not None else self.config.temperature
        tokens = max_tokens if max_tokens is not None else self.config.max_tokens

        kwargs = {
            "model": model,
            "max_tokens": tokens,
            "temperature": temp,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            raise

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

        return LLMResponse(
            content=text,
            model=model,
            provider=LLMProvider.ANTHROPIC,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )


CLIENT_CLASSES = {
    LLMProvider.GROQ: GroqClient,
    LLMProvider.OPENAI: OpenAIClient,
    LLMProvider.ANTHROPIC: AnthropicClient,
}


class LLMClient:
    """
    Unified LLM client with provider switching and fallback.

    Primary provider is tried first.
    Falls back to the next configured provider on failure.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._primary: Optional[BaseLLMClient] = None
        self._fallback: Optional[BaseLLMClient] = None
        self._setup_clients()

    def _setup_clients(self):
        """Setup primary and fallback clients based on config."""
        if self.config.api_key_for(self.config.provider):
            self._primary = CLIENT_CLASSES[self.config.provider](self.config)

        for provider in PROVIDER_ORDER:
            if provider == self.config.provider:
                continue
            if self.config.api_key_for(provider):
                self._fallback = CLIENT_CLASSES[provider](self.config)
                break

        if self._primary is None and self._fallback is None:
            logger.warning("No LLM API keys configured. Narrative analysis disabled.")

    @property
    def is_configured(self) -> bool:
        return self._primary is not None or self._fallback is not None

    async def generate(
        self,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate LLM response with automatic fallback.

        Tries primary provider first, falls back to secondary on failure.
        Cancellation is never retried on the fallback.
        """
        if not self.is_configured:
            raise RuntimeError("No LLM providers configured")

        # Try primary
        if self._primary:
            try:
                return await self._primary.generate(
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
            except Exception as e:
                logger.warning(f"Primary LLM failed: {e}, trying fallback...")
                if self._fallback is None:
                    raise

        # Try fallback
        return await self._fallback.generate(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def get_active_provider(self) -> Optional[LLMProvider]:
        """Get the provider that is tried first."""
        if self._primary:
            return self._primary.provider
        if self._fallback:
            return self._fallback.provider
        return None


# Singleton instance management
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        from ada_ta.core.config import settings

        config = LLMConfig(
            provider=LLMProvider(settings.llm_primary_provider),
            groq_api_key=settings.groq_api_key,
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            groq_base_url=settings.groq_base_url,
            groq_model=settings.llm_model,
            openai_model=settings.openai_model,
            anthropic_model=settings.anthropic_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
        _llm_client = LLMClient(config)
    return _llm_client
