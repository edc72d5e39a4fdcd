"""Tool-call arguments and aggregation results."""
from datetime import date
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from banking_chatbot.models.transaction import TransactionType, TransactionView


class SummaryType(str, Enum):
    """Aggregation kinds the transaction summary tool understands."""

    TOTAL_AMOUNT = "total_amount"
    COUNT = "count"
    LIST = "list"


class QueryParameters(BaseModel):
    """
    Arguments of a ``getTransactionSummary`` call.

    All optional fields are filters combined with AND. ``summary_type`` stays a
    plain string so an unknown kind can fall back to a list instead of failing.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account_id: str = Field(..., alias="accountId")
    summary_type: str = Field(..., alias="summaryType", min_length=1)
    recipient: Optional[str] = None
    sender: Optional[str] = None
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    category: Optional[str] = None
    transaction_type: Optional[TransactionType] = Field(None, alias="transactionType")
    merchant_name: Optional[str] = Field(None, alias="merchantName")

    @field_validator(
        "recipient", "sender", "category", "merchant_name", "start_date", "end_date",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("transaction_type", mode="before")
    @classmethod
    def _lowercase_type(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @field_validator("summary_type", mode="before")
    @classmethod
    def _normalize_summary_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AggregationResult(BaseModel):
    """Payload handed back to the reasoning service as the tool result."""

    result: Union[int, str, List[TransactionView]]
    unit: Optional[str] = None
    message: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
