from .backend import LLMBackend
from ..config import LLMConfig
from ..errors import ConfigurationError


def create_backend(config: LLMConfig) -> LLMBackend:
    """
    Factory for constructing the language-model backend.

    Supported backends:
    - "ollama" → local Ollama server
    - "groq"   → Groq OpenAI-compatible API (needs GROQ_API_KEY)
    """

    if config.backend == "ollama":
        from .ollama_backend import OllamaBackend

        kwargs = {"timeout_seconds": config.timeout_seconds}
        if config.model:
            kwargs["model"] = config.model
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return OllamaBackend(**kwargs)

    if config.backend == "groq":
        from .groq_backend import GroqBackend

        kwargs = {"timeout_seconds": config.timeout_seconds}
        if config.model:
            kwargs["model"] = config.model
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return GroqBackend(**kwargs)

    raise ConfigurationError(
        f"Unsupported llm backend: {config.backend}"
    )
