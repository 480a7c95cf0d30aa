"""Schema loading and validation utilities."""

import json
from pathlib import Path

import jsonschema

from connectsquares.core.errors import ErrorKind, MatchError


def load_schema(path: Path) -> dict:
    """Load a JSON Schema file and return as dict."""
    with open(path) as f:
        return json.load(f)


def validate_or_reject(instance: object, schema: dict, kind: ErrorKind) -> None:
    """Validate ``instance`` against ``schema``, raising MatchError(kind) on failure."""
    try:
        jsonschema.validate(instance, schema)
    except jsonschema.ValidationError as e:
        raise MatchError(kind, f"Schema validation: {e.message}") from e
