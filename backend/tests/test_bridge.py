"""Tests for the tool-call bridge."""
from typing import Any, Dict, List

import pytest

from banking_chatbot.adapters.base import ReasoningAdapter, ReasoningSession
from banking_chatbot.adapters.mock import MockReasoningAdapter
from banking_chatbot.errors import (
    InvalidArgumentError,
    NoResultError,
    ServiceUnavailableError,
    UpstreamFailureError,
)
from banking_chatbot.models.reasoning import ModelTurn, ToolCall
from banking_chatbot.services.bridge import ToolCallBridge
from banking_chatbot.services.fetcher import TransactionFetcher
from banking_chatbot.services.prompts import TRANSACTION_SUMMARY_TOOL
from conftest import ACCOUNT_ID, FakeStore, make_manager


class ScriptedSession(ReasoningSession):
    def __init__(self, turns: List[Any]):
        self.turns = list(turns)
        self.messages: List[str] = []
        self.tool_results: List[Dict[str, Any]] = []

    async def _next(self) -> ModelTurn:
        turn = self.turns.pop(0)
        if isinstance(turn, Exception):
            raise turn
        return turn

    async def send_message(self, text: str) -> ModelTurn:
        self.messages.append(text)
        return await self._next()

    async def send_tool_result(self, call: ToolCall, payload: Dict[str, Any]) -> ModelTurn:
        self.tool_results.append({"call": call, "payload": payload})
        return await self._next()


class ScriptedAdapter(ReasoningAdapter):
    def __init__(self, *turns):
        super().__init__("scripted")
        self.session = ScriptedSession(turns)
        self.system_instruction = None
        self.tools = None

    def start_session(self, system_instruction, tools):
        self.system_instruction = system_instruction
        self.tools = tools
        return self.session


def summary_call(**args) -> ModelTurn:
    return ModelTurn(tool_call=ToolCall(name=TRANSACTION_SUMMARY_TOOL, args=args))


@pytest.fixture
def fetcher(manager):
    return TransactionFetcher(manager)


@pytest.mark.asyncio
async def test_direct_text_answer(fetcher):
    adapter = ScriptedAdapter(ModelTurn(text="  Hi there!  "))
    bridge = ToolCallBridge(adapter, fetcher)

    answer = await bridge.answer(ACCOUNT_ID, "hello")

    assert answer == "Hi there!"
    assert adapter.session.tool_results == []
    assert "Testuser Alpha" in adapter.system_instruction
    assert adapter.tools[0]["name"] == TRANSACTION_SUMMARY_TOOL


@pytest.mark.asyncio
async def test_tool_round_trip(fetcher):
    adapter = ScriptedAdapter(
        summary_call(accountId=ACCOUNT_ID, summaryType="count"),
        ModelTurn(text="You made 5 transactions."),
    )
    bridge = ToolCallBridge(adapter, fetcher)

    answer = await bridge.answer(ACCOUNT_ID, "How many transactions do I have?")

    assert answer == "You made 5 transactions."
    assert adapter.session.messages == ["How many transactions do I have?"]
    assert adapter.session.tool_results[0]["payload"] == {"result": 5, "unit": "count"}


@pytest.mark.asyncio
async def test_model_supplied_account_id_is_replaced(ledger_rows, owner_rows):
    other_account = "3456789012"
    ledger = FakeStore("ledger", rows=ledger_rows)
    fetcher = TransactionFetcher(make_manager(ledger, FakeStore("accounts", rows=owner_rows)))
    adapter = ScriptedAdapter(
        summary_call(accountId=other_account, summaryType="total_amount"),
        ModelTurn(text="done"),
    )

    await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "How much money moved?")

    # Queries and totals are computed for the caller, not the model's account
    assert ledger.queries[0][1] == (ACCOUNT_ID, ACCOUNT_ID)
    assert adapter.session.tool_results[0]["payload"]["result"] == "14150.50"


@pytest.mark.asyncio
async def test_missing_account_id_argument_is_filled_in(fetcher):
    adapter = ScriptedAdapter(summary_call(summaryType="list"), ModelTurn(text="ok"))

    await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "List my transactions")

    assert adapter.session.tool_results[0]["payload"]["message"] == "Found 5 transactions."


@pytest.mark.asyncio
async def test_unknown_tool_reports_error_to_model(fetcher):
    adapter = ScriptedAdapter(
        ModelTurn(tool_call=ToolCall(name="transferMoney", args={"amount": 10})),
        ModelTurn(text="Sorry, I can't do transfers."),
    )

    answer = await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "Send $10 to Bob")

    assert answer == "Sorry, I can't do transfers."
    payload = adapter.session.tool_results[0]["payload"]
    assert "transferMoney" in payload["error"]


@pytest.mark.asyncio
async def test_invalid_tool_arguments_report_error_to_model(fetcher):
    adapter = ScriptedAdapter(
        summary_call(summaryType="count", startDate="last tuesday"),
        ModelTurn(text="Could you give me a date?"),
    )

    answer = await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "Count since last tuesday")

    assert answer == "Could you give me a date?"
    assert "Invalid arguments" in adapter.session.tool_results[0]["payload"]["error"]


@pytest.mark.asyncio
async def test_no_tool_call_and_no_text(fetcher):
    adapter = ScriptedAdapter(ModelTurn(text="   "))

    with pytest.raises(NoResultError) as exc_info:
        await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "???")

    assert "could not understand" in exc_info.value.public_message
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_no_text_after_tool_result(fetcher):
    adapter = ScriptedAdapter(summary_call(summaryType="count"), ModelTurn())

    with pytest.raises(NoResultError) as exc_info:
        await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "How many?")

    assert "could not generate" in exc_info.value.public_message


@pytest.mark.asyncio
async def test_reasoning_service_failure_is_translated(fetcher):
    adapter = ScriptedAdapter(RuntimeError("Gemini API error: 429 RESOURCE_EXHAUSTED"))

    with pytest.raises(UpstreamFailureError) as exc_info:
        await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "How many?")

    assert "RESOURCE_EXHAUSTED" not in exc_info.value.public_message


@pytest.mark.asyncio
async def test_ledger_down_propagates_service_unavailable(accounts):
    fetcher = TransactionFetcher(make_manager(FakeStore("ledger", down=True), accounts))
    adapter = ScriptedAdapter(ModelTurn(text="never sent"))

    with pytest.raises(ServiceUnavailableError):
        await ToolCallBridge(adapter, fetcher).answer(ACCOUNT_ID, "How many?")

    assert adapter.session.messages == []


@pytest.mark.asyncio
async def test_blank_question_rejected(fetcher):
    with pytest.raises(InvalidArgumentError):
        await ToolCallBridge(ScriptedAdapter(), fetcher).answer(ACCOUNT_ID, "  ")


@pytest.mark.asyncio
async def test_mock_adapter_end_to_end(fetcher):
    bridge = ToolCallBridge(MockReasoningAdapter("mock:test"), fetcher)

    assert await bridge.answer(ACCOUNT_ID, "How many transactions did I receive?") == (
        "You have 3 matching transactions."
    )
    assert await bridge.answer(ACCOUNT_ID, "How much did I spend?") == "The total is $3750.50."
    assert await bridge.answer(ACCOUNT_ID, "hello") == "Hello! Ask me anything about your transactions."
