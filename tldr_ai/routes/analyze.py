from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from tldr_ai.core.errors import UploadError
from tldr_ai.core.settings import Settings
from tldr_ai.dependencies import get_analyst, get_settings_dependency
from tldr_ai.schemas.inputs import TextInput
from tldr_ai.schemas.results import AnalysisResult, ErrorResponse, UploadResult
from tldr_ai.schemas.validation import validate_payload
from tldr_ai.services.analyst import TextAnalyst
from tldr_ai.services.file_extractor import extract_text_from_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyze"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    500: {"model": ErrorResponse, "description": "Model call failed"},
}


@router.post("/analyze", response_model=AnalysisResult, responses=ERROR_RESPONSES)
def analyze_text(
    payload: TextInput,
    analyst: Annotated[TextAnalyst, Depends(get_analyst)],
) -> AnalysisResult:
    return analyst.analyze(payload.text)


@router.post("/upload", response_model=UploadResult, responses=ERROR_RESPONSES)
async def analyze_file(
    analyst: Annotated[TextAnalyst, Depends(get_analyst)],
    settings: Annotated[Settings, Depends(get_settings_dependency)],
    file: Optional[UploadFile] = File(None),
) -> UploadResult:
    if file is None:
        raise UploadError("No file uploaded")

    file_name = file.filename or "upload"
    # One byte past the limit is enough to reject an oversized file
    raw = await file.read(settings.max_upload_bytes + 1)
    text, filetype = await run_in_threadpool(
        extract_text_from_upload, file_name, raw, max_bytes=settings.max_upload_bytes
    )
    logger.info("Extracted %s chars from %s (%s)", f"{len(text):,}", file_name, filetype)

    if not text:
        raise UploadError(f"Could not extract readable text from {file_name} ({filetype}).")

    payload = validate_payload(TextInput, {"text": text})
    result = await run_in_threadpool(analyst.analyze, payload.text)

    return UploadResult(
        summary=result.summary,
        key_points=list(result.key_points),
        original_text=text,
        file_name=file_name,
    )
