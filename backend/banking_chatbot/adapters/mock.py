"""Mock reasoning adapter for running without API calls."""
import re
from typing import Any, Dict, List, Optional

from banking_chatbot.adapters.base import ReasoningAdapter, ReasoningSession
from banking_chatbot.models.reasoning import ModelTurn, ToolCall


class MockReasoningSession(ReasoningSession):
    """Deterministic, keyword-driven stand-in for a real model."""

    GREETINGS = {"hello", "hi", "hey", "thanks", "thank you"}
    DATE_PATTERN = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")

    def __init__(self, tools: List[Dict[str, Any]], account_id: str):
        self.tool_names = [t["name"] for t in tools]
        self.account_id = account_id

    async def send_message(self, text: str) -> ModelTurn:
        question = text.strip().lower().rstrip("!?.")
        if question in self.GREETINGS or not self.tool_names:
            return ModelTurn(text="Hello! Ask me anything about your transactions.")

        args: Dict[str, Any] = {
            "accountId": self.account_id,
            "summaryType": self._summary_type(question),
        }
        direction = self._direction(question)
        if direction:
            args["transactionType"] = direction

        dates = self.DATE_PATTERN.findall(question)
        if dates:
            args["startDate"] = dates[0]
            args["endDate"] = dates[-1]

        return ModelTurn(tool_call=ToolCall(name=self.tool_names[0], args=args, call_id="mock-call-1"))

    async def send_tool_result(self, call: ToolCall, payload: Dict[str, Any]) -> ModelTurn:
        if "error" in payload:
            return ModelTurn(text=f"Sorry, I couldn't look that up: {payload['error']}")

        result = payload.get("result")
        unit = payload.get("unit")
        if isinstance(result, list) and not result:
            return ModelTurn(text=payload.get("message") or "No transactions found.")
        if unit == "count":
            return ModelTurn(text=f"You have {result} matching transactions.")
        if unit == "currency":
            return ModelTurn(text=f"The total is ${result}.")

        lines = [payload.get("message", "")]
        for tx in result or []:
            lines.append(
                f"- {tx['date']}: {tx['type']} of ${tx['amount']} "
                f"(from ****{tx['from_account']} to ****{tx['to_account']})"
            )
        return ModelTurn(text="\n".join(line for line in lines if line))

    @staticmethod
    def _summary_type(question: str) -> str:
        if "how many" in question or "number of" in question:
            return "count"
        if any(word in question for word in ("total", "how much", "spent", "spend")):
            return "total_amount"
        return "list"

    @staticmethod
    def _direction(question: str) -> Optional[str]:
        if any(word in question for word in ("spent", "spend", "sent", "paid")):
            return "debit"
        if any(word in question for word in ("receiv", "deposit", "earned")):
            return "credit"
        return None


class MockReasoningAdapter(ReasoningAdapter):
    """Mock adapter that answers deterministically from tool results."""

    # Deliberately not the caller's id; the bridge must replace it
    MOCK_ACCOUNT_ID = "0000000000"

    def start_session(
        self,
        system_instruction: str,
        tools: List[Dict[str, Any]],
    ) -> ReasoningSession:
        return MockReasoningSession(tools, self.config.get("account_id", self.MOCK_ACCOUNT_ID))
