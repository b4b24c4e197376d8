from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tldr_ai.api_routes import router as api_router
from tldr_ai.core.errors import InputValidationError, ModelAdapterError, UploadError
from tldr_ai.core.settings import get_settings
from tldr_ai.schemas.results import ErrorResponse
from tldr_ai.schemas.validation import violations_from_errors

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s  %(levelname)-7s  %(name)-20s │ %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TL;DR AI", description="Summarize text and answer questions about it")

app.include_router(api_router)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    violations = violations_from_errors(exc.errors())
    logger.info("Rejected %s: %d violation(s)", request.url.path, len(violations))
    return _error(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message="Invalid input", errors=violations),
    )


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    logger.info("Rejected %s: %d violation(s)", request.url.path, len(exc.violations))
    return _error(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message=exc.message, errors=exc.violations),
    )


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    logger.info("Rejected upload: %s", exc)
    return _error(status.HTTP_400_BAD_REQUEST, ErrorResponse(message=str(exc)))


@app.exception_handler(ModelAdapterError)
async def model_adapter_handler(request: Request, exc: ModelAdapterError):
    # Full causal chain stays in the server log
    logger.error("Error in %s: %s", request.url.path, exc, exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(message=str(exc)))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message="Internal server error"),
    )
