"""JSON Schema validation helpers for data files.

Wraps jsonschema Draft7 validation and raises on the first error, reported
with the path of the offending element.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator


class SchemaError(ValueError):
    """Raised when data fails to validate against a provided schema."""


COMPAT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {"type": ["string", "number", "boolean"]},
    },
}

MODULES_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id"],
        "properties": {
            "id": {"type": "string", "minLength": 1},
            "dependencies": {"type": "array", "items": {"type": "string"}},
            "payload": {"type": "string"},
            "globals": {"type": "array", "items": {"type": "string"}},
        },
        "additionalProperties": False,
    },
}


def validate(schema: Dict[str, Any], data: Any, what: str = "input") -> None:
    """Validate strictly and raise SchemaError on the first problem.

    Args:
        schema: Draft-07 JSON Schema dict.
        data:   Decoded payload to validate.
        what:   Label used in the error message.
    """
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        msg = f"Invalid {what} at '{path}': {first.message}"
        raise SchemaError(msg)
