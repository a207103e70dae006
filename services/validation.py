from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from services.errors import ValidationFailed


T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: List[FieldError] = field(default_factory=list)


ValidationResult = Union[Valid[T], Invalid]


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def _message(raw: str) -> str:
    # Custom validators raise ValueError; pydantic prefixes those messages
    return raw[len("Value error, "):] if raw.startswith("Value error, ") else raw


def field_errors(exc: ValidationError) -> List[FieldError]:
    return [FieldError(_field_name(err["loc"]), _message(err["msg"])) for err in exc.errors()]


def validate(schema: Type[T], payload: Any, *, context: Optional[Mapping[str, Any]] = None) -> ValidationResult:
    """Check ``payload`` against ``schema``; never raises for bad input."""
    if not isinstance(payload, Mapping):
        return Invalid([FieldError("body", "Request body must be a JSON object")])
    try:
        return Valid(schema.model_validate(dict(payload), context=dict(context or {})))
    except ValidationError as exc:
        return Invalid(field_errors(exc))


def require_valid(schema: Type[T], payload: Any, *, context: Optional[Mapping[str, Any]] = None) -> T:
    """Like ``validate`` but raises ``ValidationFailed`` carrying every violation."""
    result = validate(schema, payload, context=context)
    if isinstance(result, Invalid):
        raise ValidationFailed(result.errors)
    return result.value
