"""Filtering and aggregation over a normalized transaction list."""
import logging
from decimal import Decimal
from typing import Callable, List, Optional

from banking_chatbot.models.query import AggregationResult, QueryParameters, SummaryType
from banking_chatbot.models.transaction import Transaction, TransactionView
from banking_chatbot.utils.formatting import format_currency, to_decimal
from banking_chatbot.utils.timestamp import end_of_day, start_of_day, to_utc


logger = logging.getLogger(__name__)

Predicate = Callable[[Transaction], bool]


def _same(left: str, right: str) -> bool:
    return left.strip().lower() == right.strip().lower()


class AggregationEngine:
    """
    Pure filter-and-summarize engine driven by ``QueryParameters``.

    Holds no state between calls: the same transactions and parameters always
    give the same result.
    """

    def build_predicates(self, params: QueryParameters) -> List[Predicate]:
        """One predicate per supplied filter; a transaction must pass all of them."""
        predicates: List[Predicate] = []

        if params.recipient:
            recipient = params.recipient
            predicates.append(
                lambda tx: not tx.to_account or _same(tx.to_account, recipient)
            )

        if params.sender:
            sender = params.sender
            predicates.append(lambda tx: bool(tx.from_account) and _same(tx.from_account, sender))

        if params.merchant_name:
            needle = params.merchant_name.strip().lower()

            def matches_merchant(tx: Transaction) -> bool:
                fields = [f for f in (tx.from_account, tx.to_account) if f]
                return any(needle in f.lower() for f in fields)

            predicates.append(matches_merchant)

        if params.start_date or params.end_date:
            lower = start_of_day(params.start_date) if params.start_date else None
            upper = end_of_day(params.end_date) if params.end_date else None

            def in_range(tx: Transaction) -> bool:
                if tx.transaction_date is None:
                    return False
                ts = to_utc(tx.transaction_date)
                if lower and ts < lower:
                    return False
                if upper and ts > upper:
                    return False
                return True

            predicates.append(in_range)

        if params.category:
            category = params.category
            predicates.append(lambda tx: not tx.category or _same(tx.category, category))

        if params.transaction_type:
            wanted = params.transaction_type
            predicates.append(lambda tx: tx.type == wanted)

        return predicates

    def filter_transactions(
        self,
        transactions: List[Transaction],
        params: QueryParameters,
    ) -> List[Transaction]:
        """Keep transactions matching every supplied filter, preserving order."""
        predicates = self.build_predicates(params)
        return [tx for tx in transactions if all(p(tx) for p in predicates)]

    def aggregate(
        self,
        transactions: List[Transaction],
        account_id: str,
        params: QueryParameters,
    ) -> AggregationResult:
        """
        Summarize the filtered transactions.

        Args:
            transactions: Normalized transactions, most recent first
            account_id: The requesting account
            params: Summary kind and filters

        Returns:
            AggregationResult with a count, a formatted total or a redacted list
        """
        filtered = self.filter_transactions(transactions, params)

        if not filtered:
            return AggregationResult(result=[], message=self.empty_message(params))

        summary_type = params.summary_type
        if summary_type == SummaryType.COUNT.value:
            return AggregationResult(result=len(filtered), unit="count")

        if summary_type == SummaryType.TOTAL_AMOUNT.value:
            return AggregationResult(
                result=format_currency(self.total_amount(filtered, account_id)),
                unit="currency",
            )

        if summary_type != SummaryType.LIST.value:
            logger.warning("Unknown summary type %r, returning a list", summary_type)

        views = [self.to_view(tx) for tx in filtered]
        noun = "transaction" if len(views) == 1 else "transactions"
        return AggregationResult(
            result=views,
            unit="transactions",
            message=f"Found {len(views)} {noun}.",
        )

    @staticmethod
    def total_amount(transactions: List[Transaction], account_id: str) -> Decimal:
        # Gross movement: debits are not netted against credits
        total = Decimal("0")
        for tx in transactions:
            if tx.from_account == account_id or tx.to_account == account_id:
                total += to_decimal(tx.amount) or Decimal("0")
        return total

    @staticmethod
    def to_view(tx: Transaction) -> TransactionView:
        return TransactionView(
            date=tx.formatted_date,
            description=tx.description or None,
            amount=tx.formatted_amount,
            type=tx.type,
            from_account=tx.from_account_last_four,
            to_account=tx.to_account_last_four,
        )

    @staticmethod
    def empty_message(params: QueryParameters) -> str:
        """Explain an empty result using the most specific filter supplied."""
        if params.category:
            return f"No transactions found in category '{params.category}'."
        if params.merchant_name:
            return f"No transactions found matching '{params.merchant_name}'."
        date_range = _describe_range(params)
        if date_range:
            return f"No transactions found {date_range}."
        return "No transactions found matching your criteria."


def _describe_range(params: QueryParameters) -> Optional[str]:
    start, end = params.start_date, params.end_date
    if start and end:
        return f"between {start.isoformat()} and {end.isoformat()}"
    if start:
        return f"on or after {start.isoformat()}"
    if end:
        return f"on or before {end.isoformat()}"
    return None
