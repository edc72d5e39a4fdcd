"""OpenAI reasoning adapter."""
import json
import logging
from typing import Any, Dict, List

from openai import AsyncOpenAI

from banking_chatbot.adapters.base import ReasoningAdapter, ReasoningSession
from banking_chatbot.config import settings
from banking_chatbot.models.reasoning import ModelTurn, ToolCall


logger = logging.getLogger(__name__)


class OpenAISession(ReasoningSession):
    """Chat-completions conversation that keeps its own message history."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model_id: str,
        system_instruction: str,
        tools: List[Dict[str, Any]],
        temperature: float,
    ):
        self.client = client
        self.model_id = model_id
        self.tools = [{"type": "function", "function": decl} for decl in tools]
        self.temperature = temperature
        self.messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_instruction},
        ]

    async def send_message(self, text: str) -> ModelTurn:
        self.messages.append({"role": "user", "content": text})
        return await self._complete()

    async def send_tool_result(self, call: ToolCall, payload: Dict[str, Any]) -> ModelTurn:
        self.messages.append({
            "role": "tool",
            "tool_call_id": call.call_id,
            "content": json.dumps(payload),
        })
        return await self._complete()

    async def _complete(self) -> ModelTurn:
        try:
            response = await self.client.chat.completions.create(
                model=self.model_id,
                messages=self.messages,
                tools=self.tools,
                temperature=self.temperature,
            )
        except Exception as e:
            raise RuntimeError(f"OpenAI API error: {str(e)}") from e

        if not response.choices:
            return ModelTurn()
        message = response.choices[0].message

        entry: Dict[str, Any] = {"role": "assistant", "content": message.content}
        tool_call = None
        if message.tool_calls:
            # Only the first call is answered, so only it goes into the history
            first = message.tool_calls[0]
            entry["tool_calls"] = [{
                "id": first.id,
                "type": "function",
                "function": {"name": first.function.name, "arguments": first.function.arguments},
            }]
            tool_call = ToolCall(
                name=first.function.name,
                args=self._parse_arguments(first.function.arguments),
                call_id=first.id,
            )
        self.messages.append(entry)

        return ModelTurn(text=message.content, tool_call=tool_call)

    @staticmethod
    def _parse_arguments(raw: str) -> Dict[str, Any]:
        try:
            args = json.loads(raw or "{}")
        except json.JSONDecodeError:
            logger.warning("Tool call arguments are not valid JSON: %r", raw)
            return {}
        return args if isinstance(args, dict) else {}


class OpenAIAdapter(ReasoningAdapter):
    """OpenAI API adapter."""

    def __init__(self, model_id: str = "gpt-4o-mini", **kwargs):
        super().__init__(model_id, **kwargs)
        api_key = kwargs.get("api_key") or settings.openai_api_key
        if not api_key:
            raise ValueError("OpenAI API key required")
        self.client = AsyncOpenAI(api_key=api_key)
        self.temperature = kwargs.get("temperature", settings.temperature)

    def start_session(
        self,
        system_instruction: str,
        tools: List[Dict[str, Any]],
    ) -> ReasoningSession:
        return OpenAISession(
            self.client,
            self.model_id,
            system_instruction,
            tools,
            self.temperature,
        )
