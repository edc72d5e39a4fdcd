"""Provider-neutral view of a reasoning-service response."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    """A request from the model to run a local tool."""

    name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    call_id: Optional[str] = Field(None, description="Provider id used to pair the tool result")


class ModelTurn(BaseModel):
    """One response from the reasoning service."""

    text: Optional[str] = None
    tool_call: Optional[ToolCall] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())
