"""Transaction retrieval from the ledger and identity stores."""
import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from banking_chatbot.errors import InvalidArgumentError, ServiceError, ServiceUnavailableError
from banking_chatbot.models.transaction import AccountTransactions, Transaction, TransactionType
from banking_chatbot.storage.database import ConnectionManager
from banking_chatbot.utils.formatting import format_currency, format_date, last_four, parse_amount
from banking_chatbot.utils.timestamp import parse_timestamp


logger = logging.getLogger(__name__)

TRANSACTIONS_QUERY = """
    SELECT timestamp, amount, from_acct, to_acct
    FROM transactions
    WHERE (from_acct = %s OR to_acct = %s)
    ORDER BY timestamp DESC
"""

OWNER_QUERY = """
    SELECT firstname, lastname
    FROM users
    WHERE accountid = %s
"""

UNKNOWN_OWNER = "Unknown"


def owner_name(row: Optional[Dict[str, Any]]) -> str:
    """Compose "first last", falling back to "Unknown"."""
    if not row:
        return UNKNOWN_OWNER
    name = f"{row.get('firstname') or ''} {row.get('lastname') or ''}".strip()
    return name or UNKNOWN_OWNER


def _parse_date(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def normalize_transaction(row: Dict[str, Any], account_id: str) -> Transaction:
    """Build the account holder's view of one ledger row."""
    amount = parse_amount(row.get("amount"))
    from_account = str(row.get("from_acct") or "")
    to_account = str(row.get("to_acct") or "")
    is_debit = from_account == account_id

    return Transaction(
        transaction_date=_parse_date(row.get("timestamp")),
        formatted_date=format_date(row.get("timestamp")),
        amount=amount,
        from_account=from_account,
        to_account=to_account,
        type=TransactionType.DEBIT if is_debit else TransactionType.CREDIT,
        from_account_last_four=last_four(from_account),
        to_account_last_four=last_four(to_account),
        formatted_amount=format_currency(amount),
        description=row.get("description"),
        category=row.get("category"),
    )


def apply_running_balance(transactions: List[Transaction]) -> List[Transaction]:
    """
    Attach a running balance to each transaction, folding in the given order.

    The ledger returns most recent first, so the balance at position i is the
    signed sum of positions 0..i of that list, not a chronological balance.
    """
    balance = Decimal("0")
    for tx in transactions:
        balance += Decimal(str(tx.signed_amount))
        tx.balance = float(balance)
        tx.formatted_balance = format_currency(balance)
    return transactions


class TransactionFetcher:
    """Fetches and normalizes one account's transaction history."""

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    async def fetch_transactions(self, account_id: str) -> AccountTransactions:
        """
        Retrieve every transaction involving ``account_id`` plus the owner's name.

        Raises:
            InvalidArgumentError: account_id is empty
            ServiceUnavailableError: the ledger store is unreachable
            ServiceError: the ledger query failed
        """
        if not account_id or not str(account_id).strip():
            raise InvalidArgumentError("'accountId' is required")

        ledger_ok, accounts_ok = await self.connections.probe_all()
        if not ledger_ok:
            raise ServiceUnavailableError("Ledger database unreachable after retries")

        # Both queries always run to completion; either may fail on its own
        ledger_result, owner_result = await asyncio.gather(
            self.connections.ledger.run(
                self.connections.ledger.fetch_all,
                TRANSACTIONS_QUERY,
                (account_id, account_id),
            ),
            self._fetch_owner(account_id, accounts_ok),
            return_exceptions=True,
        )

        if isinstance(ledger_result, BaseException):
            logger.error("Error retrieving transaction data: %s", ledger_result)
            raise ServiceError(
                f"Failed to retrieve transaction data: Transaction query failed: {ledger_result}"
            ) from ledger_result

        if isinstance(owner_result, BaseException):
            logger.warning("User data unavailable: %s", owner_result)
            owner_row = None
        elif not owner_result:
            logger.warning("User data unavailable: No matching user found")
            owner_row = None
        else:
            owner_row = owner_result[0]

        account_owner = owner_name(owner_row)
        account_number = last_four(account_id)
        timestamp = datetime.now(timezone.utc)

        if not ledger_result:
            return AccountTransactions(
                account_owner=account_owner,
                account_number=account_number,
                transactions=[],
                timestamp=timestamp,
            )

        transactions = [normalize_transaction(row, account_id) for row in ledger_result]
        apply_running_balance(transactions)

        logger.info(
            "Fetched transactions",
            extra={"account": account_number, "count": len(transactions)},
        )
        return AccountTransactions(
            account_owner=account_owner,
            account_number=account_number,
            transactions=transactions,
            timestamp=timestamp,
        )

    async def _fetch_owner(self, account_id: str, reachable: bool) -> List[Dict[str, Any]]:
        if not reachable:
            raise ServiceUnavailableError("Accounts database not available")
        return await self.connections.accounts.run(
            self.connections.accounts.fetch_all,
            OWNER_QUERY,
            (account_id,),
        )
