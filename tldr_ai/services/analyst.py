from __future__ import annotations

import logging
from typing import Any, Optional

from google.genai import types
from pydantic import ValidationError

from tldr_ai.core.errors import AnalysisFailure, AnswerFailure, ResponseShapeError
from tldr_ai.core.settings import Settings
from tldr_ai.schemas.results import MAX_KEY_POINTS, MIN_KEY_POINTS, AnalysisResult
from tldr_ai.services.llm_client import GeminiLLM, LLMConfig, build_llm

logger = logging.getLogger(__name__)


ANALYST_SYSTEM = f"""You are an expert text analyst. Analyze the provided text and return a JSON response with:
1. A single, concise sentence that captures the essence of the entire text
2. An array of {MIN_KEY_POINTS}-{MAX_KEY_POINTS} bullet points highlighting the most important information and conclusions

Return only valid JSON in this exact format:
{{
  "summary": "Your single sentence summary here",
  "keyPoints": ["First key point", "Second key point", "Third key point"]
}}"""

ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "summary": types.Schema(type=types.Type.STRING),
        "keyPoints": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            min_items=MIN_KEY_POINTS,
            max_items=MAX_KEY_POINTS,
        ),
    },
    required=["summary", "keyPoints"],
)

_STRICT_RULE = (
    "Use only facts that are stated explicitly in the context. "
    "Do not draw inferences beyond what the text says."
)
_RELATED_RULE = (
    "You may answer questions about the subject of the context by reasoning from "
    "what the context states, but never add outside knowledge."
)


def build_answer_prompt(context: str, question: str, allow_related: bool = True) -> str:
    scope = _RELATED_RULE if allow_related else _STRICT_RULE
    return f"""Based ONLY on the context provided below, answer the user's question.
If the answer cannot be found in the provided context, clearly state that the information is not available in the text.
{scope}

Context:
---
{context}
---

Question: {question}

Provide a clear, concise answer based only on the information in the context above."""


def _to_analysis_result(out: Any) -> AnalysisResult:
    if not isinstance(out, dict):
        raise ResponseShapeError(f"Expected a JSON object, got {type(out).__name__}")

    summary = out.get("summary")
    points = out.get("keyPoints")

    if not isinstance(summary, str) or not summary.strip():
        raise ResponseShapeError("Invalid response structure from Gemini model: missing summary")
    if not isinstance(points, list) or not points:
        raise ResponseShapeError("Invalid response structure from Gemini model: missing keyPoints")
    if not all(isinstance(p, str) for p in points):
        raise ResponseShapeError("Invalid response structure from Gemini model: keyPoints must be strings")

    key_points = [p.strip() for p in points if p.strip()]
    try:
        return AnalysisResult(summary=summary.strip(), key_points=key_points)
    except ValidationError as e:
        raise ResponseShapeError(
            f"Invalid response structure from Gemini model: expected "
            f"{MIN_KEY_POINTS}-{MAX_KEY_POINTS} key points, got {len(key_points)}"
        ) from e


class TextAnalyst:
    """Model adapter: the only place that talks to the text-generation provider.

    Both operations are a single provider round trip. Whatever goes wrong
    (transport, auth, empty or malformed output) comes out as
    ``AnalysisFailure`` / ``AnswerFailure`` with the original error chained.
    """

    def __init__(self, settings: Settings, llm: Optional[GeminiLLM] = None):
        self.settings = settings

        if llm is None:
            llm = build_llm(
                LLMConfig(
                    provider=settings.llm_provider,
                    model=settings.llm_model,
                    temperature=settings.llm_temperature,
                    max_tokens=settings.llm_max_tokens,
                    timeout_s=settings.llm_timeout_s,
                    gemini_api_key=settings.gemini_api_key,
                )
            )
        self.llm = llm

    def analyze(self, text: str) -> AnalysisResult:
        logger.info("Analyzing text (%s chars)", f"{len(text):,}")
        try:
            out = self.llm.generate_json(
                system=ANALYST_SYSTEM,
                user=f"Analyze this text:\n\n{text}",
                schema=ANALYSIS_SCHEMA,
            )
            return _to_analysis_result(out)
        except Exception as e:
            logger.warning("Analysis failed: %s: %s", type(e).__name__, e)
            raise AnalysisFailure(f"Failed to analyze text: {e}") from e

    def answer(self, context: str, question: str, allow_related: bool = True) -> str:
        logger.info(
            "Answering question (%s chars of context, allow_related=%s)",
            f"{len(context):,}",
            allow_related,
        )
        try:
            raw = self.llm.generate_text(build_answer_prompt(context, question, allow_related))
            answer = (raw or "").strip()
            if not answer:
                raise ResponseShapeError("Empty response from Gemini model")
            return answer
        except Exception as e:
            logger.warning("Answer failed: %s: %s", type(e).__name__, e)
            raise AnswerFailure(f"Failed to answer question: {e}") from e
