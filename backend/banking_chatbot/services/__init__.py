from .fetcher import TransactionFetcher
from .aggregation import AggregationEngine
from .prompts import PromptBuilder
from .bridge import BridgeState, ToolCallBridge

__all__ = [
    "TransactionFetcher",
    "AggregationEngine",
    "PromptBuilder",
    "BridgeState",
    "ToolCallBridge",
]
