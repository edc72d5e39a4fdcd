from .base import ReasoningAdapter, ReasoningSession
from .mock import MockReasoningAdapter
from .openai_adapter import OpenAIAdapter
from .gemini_adapter import GeminiAdapter
from .factory import get_reasoning_adapter

__all__ = [
    "ReasoningAdapter",
    "ReasoningSession",
    "MockReasoningAdapter",
    "OpenAIAdapter",
    "GeminiAdapter",
    "get_reasoning_adapter",
]
