from typing import Literal

from pydantic import ConfigDict, Field

from tldr_ai.schemas.inputs import CamelModel

MIN_KEY_POINTS = 3
MAX_KEY_POINTS = 5


class AnalysisResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    summary: str = Field(min_length=1)
    key_points: list[str] = Field(min_length=MIN_KEY_POINTS, max_length=MAX_KEY_POINTS)


class AnswerResult(CamelModel):
    answer: str = Field(min_length=1)


class UploadResult(AnalysisResult):
    original_text: str
    file_name: str


Constraint = Literal["required", "min_length", "max_length", "type", "invalid"]


class FieldViolation(CamelModel):
    field: str
    constraint: Constraint
    message: str


class ErrorResponse(CamelModel):
    message: str
    errors: list[FieldViolation] | None = None
