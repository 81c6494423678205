# models.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    content: str
    is_user: bool = Field(..., alias="isUser", description="True for user turns, False for model turns")
    timestamp: datetime


class Session(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Client-generated session identifier")
    created_at: datetime = Field(..., alias="createdAt")


class ChatRequest(BaseModel):
    message: str = Field(..., description="User message; length is checked by ChatService")


class ChatResponse(BaseModel):
    response: str
    timestamp: str


class ResetResponse(BaseModel):
    message: str


class HistorySummary(BaseModel):
    messages: int
