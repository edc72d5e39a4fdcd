"""Base reasoning-service adapter interface."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from banking_chatbot.models.reasoning import ModelTurn, ToolCall


class ReasoningSession(ABC):
    """One conversation with the reasoning service, scoped to a single request."""

    @abstractmethod
    async def send_message(self, text: str) -> ModelTurn:
        """
        Send the user's question.

        Returns:
            ModelTurn holding either a tool call or free text
        """
        pass

    @abstractmethod
    async def send_tool_result(self, call: ToolCall, payload: Dict[str, Any]) -> ModelTurn:
        """
        Return a tool's result (or error payload) to the model.

        Args:
            call: The tool call being answered
            payload: JSON-serializable result

        Returns:
            ModelTurn, normally holding the final answer text
        """
        pass


class ReasoningAdapter(ABC):
    """Abstract base class for reasoning-service adapters."""

    def __init__(self, model_id: str, **kwargs):
        """
        Initialize the adapter.

        Args:
            model_id: Identifier for the model (e.g., "gemini-1.5-flash-002", "gpt-4o-mini")
            **kwargs: Additional provider-specific configuration
        """
        self.model_id = model_id
        self.config = kwargs

    @abstractmethod
    def start_session(
        self,
        system_instruction: str,
        tools: List[Dict[str, Any]],
    ) -> ReasoningSession:
        """
        Open a conversation with the given system instruction and tool declarations.

        Args:
            system_instruction: Rules the assistant must follow
            tools: Function declarations ({"name", "description", "parameters"})
        """
        pass
