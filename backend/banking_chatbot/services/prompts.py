"""System instruction and tool declaration for the reasoning service."""
from datetime import date
from typing import Any, Dict, Optional


TRANSACTION_SUMMARY_TOOL = "getTransactionSummary"

TRANSACTION_SUMMARY_DECLARATION: Dict[str, Any] = {
    "name": TRANSACTION_SUMMARY_TOOL,
    "description": (
        "Look up the user's bank transactions and return a count, a total amount "
        "or a list of matching transactions. Use this for every question about "
        "the user's transactions, spending, payments or transfers."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "accountId": {
                "type": "string",
                "description": "The user's account id.",
            },
            "summaryType": {
                "type": "string",
                "enum": ["total_amount", "count", "list"],
                "description": "total_amount sums amounts, count counts transactions, list returns them.",
            },
            "recipient": {
                "type": "string",
                "description": "Account that received the money.",
            },
            "sender": {
                "type": "string",
                "description": "Account that sent the money.",
            },
            "startDate": {
                "type": "string",
                "description": "First day to include, ISO date YYYY-MM-DD.",
            },
            "endDate": {
                "type": "string",
                "description": "Last day to include, ISO date YYYY-MM-DD.",
            },
            "category": {
                "type": "string",
                "description": "Transaction category.",
            },
            "transactionType": {
                "type": "string",
                "enum": ["credit", "debit"],
                "description": "credit for money received, debit for money sent.",
            },
            "merchantName": {
                "type": "string",
                "description": "Text to look for in either counterparty.",
            },
        },
        "required": ["accountId", "summaryType"],
    },
}


class PromptBuilder:
    """Builds the system instruction sent with every question."""

    SYSTEM_INSTRUCTION_TEMPLATE = """You are a helpful and precise banking assistant chatbot.
Your ONLY knowledge source is the user's transaction history, which you can query with the {tool_name} tool.

INSTRUCTIONS:
- For any question about transactions, spending, payments, transfers or balances, call {tool_name}
- Answer SOLELY from the tool result; do not invent information or use external knowledge
- If the answer cannot be determined from the transactions, say so clearly
- Never reveal full account numbers; refer to accounts by their last four digits
- Be concise and answer the question directly

The account holder is {owner} (account ending {account_number}).
Today's date is {today}."""

    def build_system_instruction(
        self,
        owner: str,
        account_number: str,
        today: Optional[date] = None,
    ) -> str:
        return self.SYSTEM_INSTRUCTION_TEMPLATE.format(
            tool_name=TRANSACTION_SUMMARY_TOOL,
            owner=owner,
            account_number=account_number,
            today=(today or date.today()).isoformat(),
        )
