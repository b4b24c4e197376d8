"""Turn pydantic error lists into field-level violations.

Used twice: directly through ``validate_payload`` and by the HTTP layer for
FastAPI's ``RequestValidationError``, so both report the same shape.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tldr_ai.core.errors import InputValidationError
from tldr_ai.schemas.results import FieldViolation

M = TypeVar("M", bound=BaseModel)

_CONSTRAINTS = {
    "missing": "required",
    "string_too_short": "min_length",
    "too_short": "min_length",
    "string_too_long": "max_length",
    "too_long": "max_length",
    "string_type": "type",
    "bool_type": "type",
    "list_type": "type",
    "dict_type": "type",
    "model_type": "type",
    "model_attributes_type": "type",
    "json_invalid": "invalid",
    "json_type": "invalid",
}


def _field_name(loc: Sequence[Any], err_type: str) -> str:
    parts = list(loc)
    if parts and parts[0] == "body":
        parts = parts[1:]
    # json_invalid carries a character offset, not a field
    if err_type.startswith("json_") or not parts:
        return "body"
    return ".".join(str(p) for p in parts)


def _violation(err: Mapping[str, Any]) -> FieldViolation:
    err_type = str(err.get("type", ""))
    ctx = err.get("ctx") or {}
    field = _field_name(err.get("loc") or (), err_type)
    constraint = _CONSTRAINTS.get(err_type, "invalid")

    if constraint == "min_length" and ctx.get("min_length") == 1:
        # An empty string is as good as a missing one
        constraint = "required"

    if constraint == "required":
        message = f"{field} is required"
    elif constraint == "min_length":
        message = f"{field} must be at least {ctx.get('min_length')} characters"
    elif constraint == "max_length":
        message = f"{field} must be at most {ctx.get('max_length')} characters"
    else:
        message = str(err.get("msg") or "Invalid value")

    return FieldViolation(field=field, constraint=constraint, message=message)


def violations_from_errors(errors: Iterable[Mapping[str, Any]]) -> list[FieldViolation]:
    out: list[FieldViolation] = []
    seen = set()
    for err in errors:
        v = _violation(err)
        key = (v.field, v.constraint)
        if key in seen:
            continue
        seen.add(key)
        out.append(v)
    return out


def validate_payload(model: Type[M], raw: Any) -> M:
    """Validate ``raw`` against ``model`` or raise ``InputValidationError``.

    Accepts or rejects the payload as a whole; out-of-range values are never
    clamped.
    """
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise InputValidationError(violations_from_errors(exc.errors())) from exc
