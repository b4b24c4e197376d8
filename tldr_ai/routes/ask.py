from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from tldr_ai.dependencies import get_analyst
from tldr_ai.routes.analyze import ERROR_RESPONSES
from tldr_ai.schemas.inputs import QuestionInput
from tldr_ai.schemas.results import AnswerResult
from tldr_ai.services.analyst import TextAnalyst

router = APIRouter(prefix="/api", tags=["ask"])


@router.post("/ask", response_model=AnswerResult, responses=ERROR_RESPONSES)
def ask_question(
    payload: QuestionInput,
    analyst: Annotated[TextAnalyst, Depends(get_analyst)],
) -> AnswerResult:
    """Answer a follow-up question from the submitted text only."""
    answer = analyst.answer(
        payload.original_text,
        payload.question,
        allow_related=payload.allow_related_questions,
    )
    return AnswerResult(answer=answer)
