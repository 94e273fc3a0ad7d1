"""
Structural JSON Schema for the wire format.

Downstream consumers can contract-test payloads against these schemas
without executing the client. Schemas are generated from the pydantic
models (draft 2020-12) and checked with jsonschema.
"""

import logging
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import BaseModel

from release_hosting.models.entities import (
    Ack,
    Artifact,
    Checksum,
    Package,
    Release,
    ReleasePage,
    ReleaseSummary,
)
from release_hosting.models.envelope import SCHEMA_GENERATION, SchemaEnvelope
from release_hosting.schema.exceptions import (
    MissingFieldError,
    SchemaError,
    TypeMismatchError,
)

logger = logging.getLogger(__name__)

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

WIRE_MODELS: dict[str, type[BaseModel]] = {
    "Checksum": Checksum,
    "Artifact": Artifact,
    "Release": Release,
    "Package": Package,
    "ReleaseSummary": ReleaseSummary,
    "ReleasePage": ReleasePage,
    "Ack": Ack,
}

_validators: dict[type[BaseModel], Draft202012Validator] = {}


def json_type_name(value: Any) -> str:
    """Name of the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def json_schema(model_type: type[BaseModel]) -> dict[str, Any]:
    """JSON Schema for a single wire model."""
    schema = model_type.model_json_schema()
    schema.setdefault("$schema", SCHEMA_DIALECT)
    return schema


def envelope_schema(payload_type: type[BaseModel]) -> dict[str, Any]:
    """JSON Schema for an envelope wrapping ``payload_type``."""
    return json_schema(SchemaEnvelope[payload_type])  # type: ignore[valid-type]


def schema_document() -> dict[str, Any]:
    """
    Bundle of every wire schema for the current generation.

    Returns:
        Dict with the generation tag and one schema per wire model
    """
    return {
        "$schema": SCHEMA_DIALECT,
        "title": "release-hosting wire format",
        "schema_generation": SCHEMA_GENERATION,
        "models": {name: json_schema(model) for name, model in WIRE_MODELS.items()},
    }


def _get_validator(model_type: type[BaseModel]) -> Draft202012Validator:
    validator = _validators.get(model_type)
    if validator is None:
        validator = Draft202012Validator(json_schema(model_type))
        _validators[model_type] = validator
    return validator


def check_against_schema(data: dict[str, Any], model_type: type[BaseModel]) -> None:
    """
    Validate raw decoded JSON against a model's structural schema.

    Args:
        data: Decoded JSON object
        model_type: Wire model the data should conform to

    Raises:
        MissingFieldError: A required property is absent
        TypeMismatchError: A property has the wrong JSON type
        SchemaError: Any other structural violation
    """
    # Shallowest errors first: a missing top-level field beats a nested one
    errors = sorted(
        _get_validator(model_type).iter_errors(data),
        key=lambda e: (len(e.path), [str(p) for p in e.path]),
    )
    if not errors:
        logger.debug("Payload conforms to %s schema", model_type.__name__)
        return

    messages = []
    for error in errors[:10]:
        path = ".".join(str(p) for p in error.path) if error.path else "root"
        messages.append(f"{path}: {error.message}")

    first = errors[0]
    prefix = ".".join(str(p) for p in first.path)

    if first.validator == "required":
        missing = [name for name in first.validator_value if name not in first.instance]
        field = f"{prefix}.{missing[0]}" if prefix else missing[0]
        raise MissingFieldError(field, model=model_type.__name__, errors=messages)

    if first.validator == "type":
        expected = first.validator_value
        if isinstance(expected, list):
            expected = " or ".join(expected)
        raise TypeMismatchError(
            prefix or "root",
            expected=str(expected),
            actual=json_type_name(first.instance),
            model=model_type.__name__,
            errors=messages,
        )

    raise SchemaError(
        f"Payload does not conform to {model_type.__name__} schema with {len(errors)} error(s)",
        {"validation_errors": messages, "model": model_type.__name__},
    )
