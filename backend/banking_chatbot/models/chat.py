"""HTTP request and response models."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Body of ``POST /chat``. Blank checks happen in the route so they map to 400."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "userId": "1011226111",
                "question": "How much did I send to Alice last month?",
            }
        },
    )

    user_id: Optional[str] = Field(None, alias="userId", description="Authenticated account id")
    question: Optional[str] = Field(None, description="Natural-language question")


class ChatResponse(BaseModel):
    answer: str


class HealthResponse(BaseModel):
    status: str = "UP"
    timestamp: datetime
    message: str
    model: str
