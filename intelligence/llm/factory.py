"""
LLM Factory
Builds an LLM instance from settings
"""
from typing import Optional
import logging

from .base import BaseLLM
from .openai_llm import OpenAILLM
from .gemini_llm import GeminiLLM
from utils.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings=None,
    **kwargs,
) -> BaseLLM:
    """
    Create an LLM instance.

    Values not passed explicitly come from ``settings`` (an LLMSettings),
    which defaults to the environment-loaded settings.

    Example:
        llm = get_llm()
        llm = get_llm(provider="openai", model="gpt-4o")
    """
    if settings is None:
        from config import get_llm_settings
        settings = get_llm_settings()

    provider = (provider or settings.provider).lower()
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    model = model or settings.model_name or DEFAULT_MODELS[provider]
    api_key = kwargs.pop("api_key", None) or settings.api_key_for(provider)

    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)

    logger.debug(f"Using LLM provider={provider} model={model}")

    if provider == "openai":
        return OpenAILLM(
            model=model,
            api_key=api_key,
            base_url=kwargs.pop("base_url", None),
            **kwargs,
        )
    return GeminiLLM(
        model=model,
        api_key=api_key,
        **kwargs,
    )
