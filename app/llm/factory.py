from typing import ClassVar

from app.config.settings import Settings
from app.llm.client_base import BaseChatClient
from app.llm.example_client_adapter import ExampleClientAdapter
from app.llm.openai_client_adapter import OpenAIClientAdapter


class ChatClientFactory:
    """Creates the configured chat client adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseChatClient:
        """Create a configured chat client from application settings."""
        provider = settings.llm_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = (settings.llm_base_url or "").strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        # Local servers such as ollama accept any key, the SDK still wants one
        if not settings.llm_api_key and provider == "ollama":
            return "ollama"
        return settings.llm_api_key
