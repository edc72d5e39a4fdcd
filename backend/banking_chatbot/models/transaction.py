"""Transaction data models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Direction of a transaction relative to the account holder."""

    CREDIT = "credit"
    DEBIT = "debit"


class Transaction(BaseModel):
    """Ledger row normalized for one account holder."""

    transaction_date: Optional[datetime] = Field(None, description="Ledger timestamp")
    formatted_date: str = Field("", description="YYYY-MM-DD")
    amount: float = Field(0.0, description="Parsed amount; invalid values become 0")
    from_account: str = ""
    to_account: str = ""
    type: TransactionType = Field(..., description="'debit' when the holder is the source")
    from_account_last_four: str = "****"
    to_account_last_four: str = "****"
    formatted_amount: str = "0.00"
    balance: float = Field(0.0, description="Running balance in retrieval order")
    formatted_balance: str = "0.00"
    description: Optional[str] = None
    category: Optional[str] = None

    @property
    def signed_amount(self) -> float:
        return -self.amount if self.type == TransactionType.DEBIT else self.amount


class TransactionView(BaseModel):
    """Redacted transaction as returned to the reasoning service."""

    date: str
    description: Optional[str] = None
    amount: str
    type: TransactionType
    from_account: str
    to_account: str


class AccountTransactions(BaseModel):
    """Everything fetched for one account in one request."""

    account_owner: str = "Unknown"
    account_number: str = "****"
    transactions: List[Transaction] = Field(default_factory=list)
    timestamp: datetime
