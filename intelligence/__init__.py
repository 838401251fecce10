"""
Intelligence Module
LLM abstraction and batch enrichment
"""
from .llm import (
    BaseLLM,
    OpenAILLM,
    GeminiLLM,
    get_llm,
)
from .enricher import BatchEnricher

__all__ = [
    "BaseLLM",
    "OpenAILLM",
    "GeminiLLM",
    "get_llm",
    "BatchEnricher",
]
