"""Factory for creating reasoning adapters."""
from banking_chatbot.adapters.base import ReasoningAdapter
from banking_chatbot.adapters.gemini_adapter import GeminiAdapter
from banking_chatbot.adapters.mock import MockReasoningAdapter
from banking_chatbot.adapters.openai_adapter import OpenAIAdapter


def get_reasoning_adapter(model_id: str, **kwargs) -> ReasoningAdapter:
    """
    Factory function to create the appropriate adapter based on model_id.

    Args:
        model_id: Model identifier (e.g., "mock:gemini", "gemini-1.5-flash-002", "gpt-4o-mini")
        **kwargs: Additional configuration for the adapter

    Returns:
        ReasoningAdapter instance

    Raises:
        ValueError: If the provider's API key is missing or the model is not recognised
    """
    if model_id.startswith("mock:"):
        return MockReasoningAdapter(model_id, **kwargs)
    elif model_id.startswith("gpt-") or model_id.startswith("o1-") or "openai" in model_id.lower():
        return OpenAIAdapter(model_id, **kwargs)
    elif "gemini" in model_id.lower() or "google" in model_id.lower():
        return GeminiAdapter(model_id, **kwargs)
    else:
        raise ValueError(f"Unknown model {model_id!r}")
