"""Client-side state for one analysis and the questions asked about it.

The session owns an ordered, in-memory log of ``ChatMessage``. It is reset
whenever a new analysis replaces the active text and is never persisted.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Literal, Optional

from pydantic import BaseModel, Field

from tldr_ai.client.api import ApiError, TextInsightClient
from tldr_ai.core.errors import TextInsightError
from tldr_ai.schemas.results import AnalysisResult, UploadResult


class SessionError(TextInsightError):
    """The session refused a call before sending anything."""


class SessionBusyError(SessionError):
    """A request is already in flight."""


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    type: Literal["question", "answer"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatSession:
    def __init__(self, client: TextInsightClient):
        self.client = client
        self.active_text: Optional[str] = None
        self.analysis: Optional[AnalysisResult] = None
        self.messages: List[ChatMessage] = []
        self.error: Optional[str] = None
        self.busy = False

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        # Input is disabled while a request runs; not a protocol guarantee
        if self.busy:
            raise SessionBusyError("A request is already in flight")
        self.busy = True
        try:
            yield
        except ApiError as e:
            self.error = e.message
            raise
        finally:
            self.busy = False

    def _refuse(self, message: str) -> None:
        self.error = message
        raise SessionError(message)

    def _start(self, text: str, analysis: AnalysisResult) -> None:
        self.active_text = text
        self.analysis = analysis
        self.messages = []
        self.error = None

    def analyze(self, text: str) -> AnalysisResult:
        if not text.strip():
            self._refuse("Please enter some text to analyze")

        with self._in_flight():
            result = self.client.analyze(text)

        self._start(text, result)
        return result

    def analyze_file(self, path) -> UploadResult:
        with self._in_flight():
            result = self.client.upload(path)

        self._start(result.original_text, result)
        return result

    def ask(self, question: str, allow_related: bool = True) -> ChatMessage:
        """Ask about the active text; returns the answer message.

        The question and its answer are appended together, and only on success.
        """
        if not question.strip():
            self._refuse("Please enter a question")
        if not self.active_text:
            self._refuse("Please analyze some text first")

        with self._in_flight():
            answer = self.client.ask(self.active_text, question, allow_related=allow_related)

        asked = ChatMessage(type="question", content=question)
        answered = ChatMessage(type="answer", content=answer)
        self.messages.extend([asked, answered])
        self.error = None
        return answered
