"""Provider implementations."""

from .base import Provider, generate_from_single_prompt
from .gemini import GeminiProvider
from .mock import MockProvider

__all__ = [
    "GeminiProvider",
    "MockProvider",
    "Provider",
    "generate_from_single_prompt",
]
