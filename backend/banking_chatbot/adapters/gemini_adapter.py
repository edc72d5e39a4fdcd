"""Google Gemini reasoning adapter."""
from typing import Any, Dict, List

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from banking_chatbot.adapters.base import ReasoningAdapter, ReasoningSession
from banking_chatbot.config import settings
from banking_chatbot.models.reasoning import ModelTurn, ToolCall


SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}


def _to_turn(response: Any) -> ModelTurn:
    """Pull the first function call and any text out of a Gemini response."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ModelTurn()

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    texts: List[str] = []
    tool_call = None
    for part in parts:
        fc = getattr(part, "function_call", None)
        if tool_call is None and fc is not None and fc.name:
            tool_call = ToolCall(name=fc.name, args={k: v for k, v in fc.args.items()})
        text = getattr(part, "text", "")
        if text:
            texts.append(text)

    return ModelTurn(text="".join(texts) or None, tool_call=tool_call)


class GeminiSession(ReasoningSession):
    """A Gemini chat with automatic function calling disabled."""

    def __init__(self, chat: Any):
        self.chat = chat

    async def send_message(self, text: str) -> ModelTurn:
        try:
            response = await self.chat.send_message_async(text)
        except Exception as e:
            raise RuntimeError(f"Gemini API error: {str(e)}") from e
        return _to_turn(response)

    async def send_tool_result(self, call: ToolCall, payload: Dict[str, Any]) -> ModelTurn:
        message = genai.protos.Content(
            parts=[
                genai.protos.Part(
                    function_response=genai.protos.FunctionResponse(
                        name=call.name,
                        response=payload,
                    )
                )
            ]
        )
        try:
            response = await self.chat.send_message_async(message)
        except Exception as e:
            raise RuntimeError(f"Gemini API error: {str(e)}") from e
        return _to_turn(response)


class GeminiAdapter(ReasoningAdapter):
    """Google Gemini API adapter."""

    def __init__(self, model_id: str = "gemini-1.5-flash-002", **kwargs):
        super().__init__(model_id, **kwargs)
        api_key = kwargs.get("api_key") or settings.google_api_key
        if not api_key:
            raise ValueError("Google API key required")
        genai.configure(api_key=api_key)
        self.generation_config = genai.types.GenerationConfig(
            temperature=kwargs.get("temperature", settings.temperature),
            top_p=kwargs.get("top_p", settings.top_p),
            top_k=kwargs.get("top_k", settings.top_k),
            max_output_tokens=kwargs.get("max_output_tokens", settings.max_output_tokens),
        )
        self.safety_settings = kwargs.get("safety_settings", SAFETY_SETTINGS)

    def start_session(
        self,
        system_instruction: str,
        tools: List[Dict[str, Any]],
    ) -> ReasoningSession:
        model = genai.GenerativeModel(
            self.model_id,
            tools=[{"function_declarations": tools}],
            system_instruction=system_instruction,
            generation_config=self.generation_config,
            safety_settings=self.safety_settings,
        )
        return GeminiSession(model.start_chat())
