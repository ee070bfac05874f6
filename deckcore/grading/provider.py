"""
AI grading providers.

Grades a free-text flashcard answer on a 0-100 scale and answers follow-up
questions about the card. Two implementations:
- MockGrader: deterministic keyword overlap, no network (default without a key)
- OpenAIGrader: OpenAI structured outputs

Any failure to obtain a valid result raises GradingError; nothing here
touches scheduling state.
"""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from deckcore.errors import GradingError
from deckcore.grading.schemas import (
    HISTORY_WINDOW,
    ChatMessage,
    FollowUpPayload,
    FollowUpResult,
    GradePayload,
    GradeResult,
)

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_MODEL = "gpt-4o-mini"
MIN_TOKEN_LENGTH = 3

GRADE_SYSTEM_PROMPT = (
    "You are grading a student's flashcard answer.\n"
    "Rules:\n"
    "- score must be an integer from 0 to 100.\n"
    "- feedback must be concise and actionable.\n"
    "- ideal_answer should be the corrected best answer.\n"
    "- assistant_reply should be a short chat-style summary for the learner."
)

FOLLOW_UP_SYSTEM_PROMPT = (
    "You are a tutoring assistant helping the learner understand one flashcard.\n"
    "Rules:\n"
    "- Keep answers concise and educational.\n"
    "- Do not reveal irrelevant content."
)

# Initialize OpenAI client (module-level, reused across calls)
_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Get or create the OpenAI client."""
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY not found in environment variables")
        _client = OpenAI(api_key=api_key)
    return _client


class StudyGrader(ABC):
    """Interface for the AI grading collaborator."""

    @abstractmethod
    def grade_answer(
        self,
        question: str,
        expected_answer: str,
        user_answer: str,
        history: Sequence[ChatMessage] = ()
    ) -> GradeResult:
        """Score a recall attempt from 0 to 100 with feedback."""

    @abstractmethod
    def follow_up(
        self,
        question: str,
        expected_answer: str,
        message: str,
        history: Sequence[ChatMessage] = (),
        user_answer: Optional[str] = None,
        feedback: Optional[str] = None,
        ideal_answer: Optional[str] = None
    ) -> str:
        """Reply to a learner's follow-up question about the card."""


# ---- Mock Grader ----

def tokenize(text: str) -> set[str]:
    """Lowercase words of at least MIN_TOKEN_LENGTH alphanumeric characters."""
    cleaned = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    return {word for word in cleaned.split() if len(word) >= MIN_TOKEN_LENGTH}


def score_overlap(expected_answer: str, user_answer: str) -> int:
    """
    Percentage of expected-answer tokens present in the user's answer.
    """
    expected = tokenize(expected_answer)
    given = tokenize(user_answer)
    if not expected or not given:
        return 0
    coverage = len(expected & given) / len(expected)
    return max(0, min(100, int(coverage * 100 + 0.5)))


def feedback_for_score(score: int) -> str:
    if score >= 85:
        return "Strong recall. You covered most of the key points accurately."
    if score >= 60:
        return "Decent recall. You captured the core idea but missed key details."
    if score >= 40:
        return "Partial recall. Review the definition and key relationships."
    return "Low recall. Re-study this card and try to restate the core concept in your own words."


class MockGrader(StudyGrader):
    """Offline grader for local use and tests."""

    def grade_answer(self, question, expected_answer, user_answer, history=()):
        score = score_overlap(expected_answer, user_answer)
        feedback = feedback_for_score(score)
        return GradeResult(
            score=score,
            feedback=feedback,
            ideal_answer=expected_answer.strip(),
            assistant_reply=f"Score: {score}/100. {feedback}",
        )

    def follow_up(self, question, expected_answer, message, history=(),
                  user_answer=None, feedback=None, ideal_answer=None):
        return " ".join([
            "Follow-up guidance:",
            f'For "{question}", focus on the exact key idea in the ideal answer.',
            f"Your question: {message}",
        ])


# ---- OpenAI Grader ----

def history_messages(history: Sequence[ChatMessage]) -> list[dict]:
    """Most recent HISTORY_WINDOW messages in chat-completions format."""
    return [
        {"role": message.role, "content": message.content}
        for message in list(history)[-HISTORY_WINDOW:]
    ]


class OpenAIGrader(StudyGrader):
    """
    Grades answers with OpenAI structured outputs.

    Args:
        client: OpenAI client (defaults to the shared module client)
        model: Model name (defaults to GRADING_MODEL or gpt-4o-mini)
    """

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or os.getenv("GRADING_MODEL", DEFAULT_MODEL)

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_client()
        return self._client

    def grade_answer(self, question, expected_answer, user_answer, history=()):
        prompt = "\n".join([
            f"Question: {question}",
            f"Expected answer: {expected_answer}",
            f"Student answer: {user_answer}",
        ])
        messages = [
            {"role": "system", "content": GRADE_SYSTEM_PROMPT},
            *history_messages(history),
            {"role": "user", "content": prompt},
        ]
        payload = self._parse(messages, GradePayload)
        return _validated(GradeResult, payload)

    def follow_up(self, question, expected_answer, message, history=(),
                  user_answer=None, feedback=None, ideal_answer=None):
        context = [
            f"Question: {question}",
            f"Expected answer: {expected_answer}",
        ]
        if user_answer:
            context.append(f"Student answer: {user_answer}")
        if feedback:
            context.append(f"Prior feedback: {feedback}")
        if ideal_answer:
            context.append(f"Ideal answer: {ideal_answer}")
        context.append(f"Learner message: {message}")

        messages = [
            {"role": "system", "content": FOLLOW_UP_SYSTEM_PROMPT},
            *history_messages(history),
            {"role": "user", "content": "\n".join(context)},
        ]
        payload = self._parse(messages, FollowUpPayload)
        return _validated(FollowUpResult, payload).assistant_reply

    def _parse(self, messages: list[dict], response_format: type[BaseModel]) -> BaseModel:
        try:
            client = self.client
        except ValueError as exc:
            logger.warning("OpenAI grader is not configured: %s", exc)
            raise GradingError(f"Grader not configured: {exc}") from exc

        try:
            completion = client.chat.completions.parse(
                model=self.model,
                messages=messages,
                response_format=response_format,
            )
        except (OpenAIError, ValidationError) as exc:
            logger.warning("OpenAI grading request failed: %s", exc)
            raise GradingError(f"Grading request failed: {exc}") from exc

        message = completion.choices[0].message
        if getattr(message, "refusal", None):
            raise GradingError(f"Grader refused: {message.refusal}")
        if message.parsed is None:
            raise GradingError("Grader returned no structured output")
        return message.parsed


def _validated(model: type[BaseModel], payload: BaseModel):
    try:
        return model.model_validate(payload.model_dump())
    except ValidationError as exc:
        logger.warning("Invalid grading output: %s", exc)
        raise GradingError("Grader returned invalid output") from exc


# ---- Provider Selection ----

def get_grader() -> StudyGrader:
    """
    Build the grader selected by GRADING_PROVIDER (mock or openai).

    Defaults to openai when OPENAI_API_KEY is set, otherwise mock.
    """
    provider = os.getenv("GRADING_PROVIDER") or ("openai" if os.getenv("OPENAI_API_KEY") else "mock")
    provider = provider.strip().lower()
    if provider == "mock":
        return MockGrader()
    if provider == "openai":
        return OpenAIGrader()
    raise ValueError(f"Unknown GRADING_PROVIDER: {provider}")
