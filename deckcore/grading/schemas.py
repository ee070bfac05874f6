"""
Pydantic models for AI grading.

The *Payload models are sent to OpenAI as structured-output schemas and
stay unconstrained; the returned data is then validated against the
bounded result models before anything uses it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# Configuration
MAX_HISTORY_MESSAGES = 20      # Accepted from the caller
HISTORY_WINDOW = 12            # Forwarded to the model
MAX_MESSAGE_LENGTH = 4000
MAX_ANSWER_LENGTH = 8000


class ChatMessage(BaseModel):
    """One turn of the grading conversation."""
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)


def chat_history(entries: list[dict]) -> list[ChatMessage]:
    """
    Build ChatMessages from stored {role, content} dicts.

    Keeps the last MAX_HISTORY_MESSAGES non-empty entries and cuts each
    content to MAX_MESSAGE_LENGTH characters.
    """
    messages = [
        ChatMessage(role=entry["role"], content=entry["content"][:MAX_MESSAGE_LENGTH])
        for entry in entries
        if entry.get("content", "").strip()
    ]
    return messages[-MAX_HISTORY_MESSAGES:]


# ---- Structured Output Schemas ----

class GradePayload(BaseModel):
    """Raw grading output requested from the model."""
    score: int = Field(description="Correctness from 0 (wrong) to 100 (complete and accurate)")
    feedback: str = Field(description="Concise, actionable feedback for the learner")
    ideal_answer: str = Field(description="The corrected best answer")
    assistant_reply: str = Field(description="Short chat-style summary for the learner")


class FollowUpPayload(BaseModel):
    """Raw follow-up output requested from the model."""
    assistant_reply: str = Field(description="Tutor reply to the learner's message")


# ---- Validated Results ----

class GradeResult(BaseModel):
    """Grading result consumed by the grading bridge."""
    model_config = ConfigDict(str_strip_whitespace=True)

    score: int = Field(..., ge=0, le=100)
    feedback: str = Field(..., min_length=1, max_length=5000)
    ideal_answer: str = Field(..., min_length=1, max_length=5000)
    assistant_reply: str = Field(..., min_length=1, max_length=5000)


class FollowUpResult(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    assistant_reply: str = Field(..., min_length=1, max_length=6000)
