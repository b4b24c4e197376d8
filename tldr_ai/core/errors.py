from __future__ import annotations

from typing import Any


class TextInsightError(Exception):
    """Base exception for the service."""


class InputValidationError(TextInsightError):
    """Raised when a client payload violates the input schema.

    ``violations`` holds one ``FieldViolation`` per offending field/constraint.
    """

    def __init__(self, violations: list[Any], message: str = "Invalid input"):
        self.violations = violations
        self.message = message
        super().__init__(message)


class UploadError(TextInsightError):
    """Raised when an uploaded file cannot be turned into text."""


class ModelAdapterError(TextInsightError):
    """Base for everything raised by the model adapter."""


class ProviderError(ModelAdapterError):
    """Transport, auth, quota or timeout failure talking to the model provider."""


class ResponseShapeError(ModelAdapterError):
    """The provider answered, but not with the shape we asked for."""


class AnalysisFailure(ModelAdapterError):
    """Uniform failure of ``TextAnalyst.analyze``."""


class AnswerFailure(ModelAdapterError):
    """Uniform failure of ``TextAnalyst.answer``."""
