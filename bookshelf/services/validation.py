"""Schema validation for incoming book payloads."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from bookshelf.api.schemas import BookCreate, BookUpdate

# Named rule sets. Each schema forbids keys outside its declared fields.
SCHEMAS: dict[str, type[BaseModel]] = {
    "bookCreate": BookCreate,
    "bookUpdate": BookUpdate,
}


@dataclass
class ValidationResult:
    """Outcome of validating a payload against a named schema."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] | None = None


def _format_error(error: dict[str, Any]) -> str:
    """Turn one pydantic error into a human-readable message."""
    name = ".".join(str(part) for part in error["loc"])
    if error["type"] == "missing":
        return f"'{name}' is a required property"
    if error["type"] == "extra_forbidden":
        return f"'{name}' is not an allowed property"
    if not name:
        return error["msg"]
    return f"'{name}': {error['msg']}"


def validate(payload: Any, schema_name: str) -> ValidationResult:
    """
    Validate a raw payload against one of the registered schemas.

    Args:
        payload: Untrusted decoded JSON body.
        schema_name: Key into SCHEMAS, e.g. "bookCreate".

    Returns:
        ValidationResult with the cleaned data on success, or the list of
        error messages on failure. The payload itself is never modified.

    Raises:
        KeyError: If schema_name is not registered.
    """
    schema = SCHEMAS[schema_name]

    if not isinstance(payload, dict):
        return ValidationResult(valid=False, errors=["payload must be a JSON object"])

    try:
        model = schema.model_validate(payload)
    except ValidationError as e:
        return ValidationResult(valid=False, errors=[_format_error(err) for err in e.errors()])

    return ValidationResult(valid=True, data=model.model_dump())
