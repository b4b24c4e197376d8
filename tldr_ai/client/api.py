from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from tldr_ai.core.errors import TextInsightError
from tldr_ai.schemas.results import AnalysisResult, AnswerResult, FieldViolation, UploadResult


class ApiError(TextInsightError):
    """Non-2xx answer from the server, or no answer at all (``status_code == 0``)."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[List[FieldViolation]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class TextInsightClient:
    """
    HTTP client for the analyze / ask / upload endpoints.

    Each call is one independent request; nothing is retried.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 90.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def _post(self, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._http_client.post(path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(0, f"Request failed: {e}") from e

        if response.is_error:
            body = _json_or_empty(response)
            raise ApiError(
                response.status_code,
                body.get("message") or response.reason_phrase,
                [FieldViolation.model_validate(err) for err in body.get("errors") or []],
            )
        return response.json()

    def analyze(self, text: str) -> AnalysisResult:
        return AnalysisResult.model_validate(self._post("/api/analyze", json={"text": text}))

    def ask(self, original_text: str, question: str, allow_related: bool = True) -> str:
        body = self._post(
            "/api/ask",
            json={
                "originalText": original_text,
                "question": question,
                "allowRelatedQuestions": allow_related,
            },
        )
        return AnswerResult.model_validate(body).answer

    def upload(self, path: Path) -> UploadResult:
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with open(path, "rb") as f:
            body = self._post("/api/upload", files={"file": (path.name, f, content_type)})
        return UploadResult.model_validate(body)

    def close(self) -> None:
        self._http_client.close()

    def __enter__(self) -> "TextInsightClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
