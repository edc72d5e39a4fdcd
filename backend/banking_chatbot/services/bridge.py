"""Two-turn exchange with the reasoning service around the transaction tool."""
import logging
from enum import Enum
from typing import Any, Awaitable, Dict, Optional

from pydantic import ValidationError

from banking_chatbot.adapters.base import ReasoningAdapter
from banking_chatbot.errors import (
    InvalidArgumentError,
    NoResultError,
    UnknownToolError,
    UpstreamFailureError,
)
from banking_chatbot.models.query import QueryParameters
from banking_chatbot.models.reasoning import ModelTurn, ToolCall
from banking_chatbot.models.transaction import AccountTransactions
from banking_chatbot.services.aggregation import AggregationEngine
from banking_chatbot.services.fetcher import TransactionFetcher
from banking_chatbot.services.prompts import (
    TRANSACTION_SUMMARY_DECLARATION,
    TRANSACTION_SUMMARY_TOOL,
    PromptBuilder,
)


logger = logging.getLogger(__name__)


class BridgeState(str, Enum):
    AWAIT_INITIAL = "await_initial"
    EXECUTING_TOOL = "executing_tool"
    AWAIT_FINAL = "await_final"
    DONE = "done"


class ToolCallBridge:
    """
    Answers one question for one account.

    AWAIT_INITIAL -> DONE when the model answers directly, otherwise
    AWAIT_INITIAL -> EXECUTING_TOOL -> AWAIT_FINAL -> DONE.
    """

    def __init__(
        self,
        adapter: ReasoningAdapter,
        fetcher: TransactionFetcher,
        engine: Optional[AggregationEngine] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        self.adapter = adapter
        self.fetcher = fetcher
        self.engine = engine or AggregationEngine()
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def answer(self, user_id: str, question: str) -> str:
        """
        Produce the assistant's answer to ``question`` for ``user_id``.

        Raises:
            InvalidArgumentError: user_id or question is blank
            ServiceUnavailableError: the ledger store is unreachable
            UpstreamFailureError: the reasoning service failed
            NoResultError: the reasoning service gave nothing usable
        """
        if not user_id or not user_id.strip():
            raise InvalidArgumentError("Missing or invalid \"userId\" in request body.")
        if not question or not question.strip():
            raise InvalidArgumentError("Missing or invalid \"question\" in request body.")

        account = await self.fetcher.fetch_transactions(user_id)

        session = self.adapter.start_session(
            self.prompt_builder.build_system_instruction(account.account_owner, account.account_number),
            [TRANSACTION_SUMMARY_DECLARATION],
        )

        state = BridgeState.AWAIT_INITIAL
        logger.info("Sending question to %s", self.adapter.model_id, extra={"state": state.value})
        turn = await self._send(session.send_message(question))

        if turn.tool_call is None:
            if not turn.has_text:
                raise NoResultError(
                    "Reasoning service returned neither a tool call nor text",
                    public_message="Sorry, I could not understand your question.",
                )
            self._transition(state, BridgeState.DONE)
            return turn.text.strip()

        state = self._transition(state, BridgeState.EXECUTING_TOOL)
        payload = self.execute_tool(turn.tool_call, user_id, account)

        state = self._transition(state, BridgeState.AWAIT_FINAL)
        final = await self._send(session.send_tool_result(turn.tool_call, payload))
        if not final.has_text:
            raise NoResultError(
                "Reasoning service returned no text after the tool result",
                public_message="Sorry, I could not generate an answer.",
            )

        self._transition(state, BridgeState.DONE)
        return final.text.strip()

    def execute_tool(
        self,
        call: ToolCall,
        user_id: str,
        account: AccountTransactions,
    ) -> Dict[str, Any]:
        """Run the requested tool locally; failures become an error payload for the model."""
        try:
            return self._run_tool(call, user_id, account)
        except UnknownToolError as e:
            logger.warning("Model requested unknown tool %r", call.name)
            return {"error": str(e)}
        except ValidationError as e:
            logger.warning("Invalid %s arguments: %s", call.name, e.errors())
            return {"error": f"Invalid arguments for {call.name}: {e.error_count()} problem(s)."}

    def _run_tool(
        self,
        call: ToolCall,
        user_id: str,
        account: AccountTransactions,
    ) -> Dict[str, Any]:
        if call.name != TRANSACTION_SUMMARY_TOOL:
            raise UnknownToolError(f"Tool '{call.name}' is not implemented.")

        args = dict(call.args)
        supplied = args.get("accountId")
        if supplied and supplied != user_id:
            logger.warning("Ignoring model-supplied accountId", extra={"account": account.account_number})
        # Never trust the model with the account id
        args["accountId"] = user_id

        params = QueryParameters.model_validate(args)
        result = self.engine.aggregate(account.transactions, user_id, params)
        logger.info(
            "Tool %s executed",
            call.name,
            extra={"summary_type": params.summary_type, "unit": result.unit},
        )
        return result.to_payload()

    async def _send(self, request: Awaitable[ModelTurn]) -> ModelTurn:
        try:
            return await request
        except RuntimeError as e:
            logger.error("Error calling reasoning service: %s", e)
            if "RESOURCE_EXHAUSTED" in str(e):
                raise UpstreamFailureError(
                    str(e),
                    public_message="The assistant is busy right now. Please try again later.",
                ) from e
            raise UpstreamFailureError(str(e)) from e

    @staticmethod
    def _transition(current: BridgeState, target: BridgeState) -> BridgeState:
        logger.debug("Bridge %s -> %s", current.value, target.value)
        return target
