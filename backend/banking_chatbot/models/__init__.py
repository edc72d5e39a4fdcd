from .transaction import AccountTransactions, Transaction, TransactionType, TransactionView
from .query import AggregationResult, QueryParameters, SummaryType
from .reasoning import ModelTurn, ToolCall
from .chat import ChatRequest, ChatResponse, HealthResponse

__all__ = [
    "AccountTransactions",
    "Transaction",
    "TransactionType",
    "TransactionView",
    "AggregationResult",
    "QueryParameters",
    "SummaryType",
    "ModelTurn",
    "ToolCall",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
]
