"""
Argument Validation

Operations accept raw arguments (a dict from an RPC payload or an
already-parsed schema instance) and validate them before touching the
database. Validation failures become InvalidInputError (HTTP 400).
"""
from typing import Any, Iterable, Mapping, Type, TypeVar
from pydantic import BaseModel, ValidationError

from admin_panel.core.exceptions import InvalidInputError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Flatten pydantic error dicts into one human-readable message."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid input"


def ensure_args_schema(schema: Type[SchemaT], raw_args: Any) -> SchemaT:
    """
    Validate raw_args against schema or raise InvalidInputError.

    Instances of schema pass through untouched.
    """
    if isinstance(raw_args, schema):
        return raw_args
    if isinstance(raw_args, BaseModel):
        raw_args = raw_args.model_dump()
    try:
        return schema.model_validate(raw_args)
    except ValidationError as e:
        raise InvalidInputError(format_validation_errors(e.errors())) from e
