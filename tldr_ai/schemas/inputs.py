from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_TEXT_CHARS = 200_000


class CamelModel(BaseModel):
    # snake_case attributes, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextInput(CamelModel):
    text: str = Field(min_length=1, max_length=MAX_TEXT_CHARS)


class QuestionInput(CamelModel):
    original_text: str = Field(min_length=1, max_length=MAX_TEXT_CHARS)
    question: str = Field(min_length=1)
    allow_related_questions: bool = Field(default=True, strict=True)
