"""
JSON codec for wire models.

encode() turns any model into wire bytes; decode() and decode_envelope()
turn wire bytes back into models, mapping every failure onto the
SchemaError family:

- MalformedJsonError: not JSON, or not a JSON object
- MissingFieldError: a required field is absent
- TypeMismatchError: a field has the wrong type
- IncompatibleGenerationError: envelope written in an unreadable generation

Unknown fields are tolerated and preserved (models use extra="allow").
"""

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from release_hosting.models.envelope import (
    GENERATION_FIELD,
    SCHEMA_GENERATION,
    SchemaEnvelope,
    supported_generations,
)
from release_hosting.schema.exceptions import (
    IncompatibleGenerationError,
    MalformedJsonError,
    MissingFieldError,
    SchemaError,
    TypeMismatchError,
)
from release_hosting.schema.json_schema import envelope_schema, json_schema, json_type_name
from release_hosting.validation.pipeline import ValidationPipeline

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error type -> JSON type name the field expected
_EXPECTED_TYPES = {
    "int_type": "integer",
    "int_parsing": "integer",
    "int_from_float": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "string_type": "string",
    "list_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "datetime_type": "datetime",
    "datetime_parsing": "datetime",
    "datetime_from_date_parsing": "datetime",
}


def encode(instance: BaseModel) -> bytes:
    """Serialize a model (entity or envelope) to wire bytes."""
    return instance.model_dump_json().encode("utf-8")


def wrap(payload: BaseModel | None = None, **envelope_fields: Any) -> SchemaEnvelope:
    """Wrap a payload in an envelope tagged with the current generation."""
    envelope_type = SchemaEnvelope[type(payload)] if payload is not None else SchemaEnvelope  # type: ignore[misc]
    return envelope_type(schema_generation=SCHEMA_GENERATION, payload=payload, **envelope_fields)


def _load_text(data: bytes | str) -> str:
    """Wire bytes as text; invalid UTF-8 is malformed, never replaced."""
    if not isinstance(data, (bytes, bytearray)):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedJsonError(
            f"Payload is not valid UTF-8: {e.reason}",
            raw_content=data.decode("utf-8", errors="backslashreplace"),
            parse_error=f"{e.reason} at byte {e.start}",
        ) from e


def _load_object(text: str) -> dict[str, Any]:
    """Parse wire text into a JSON object."""
    if not text or not text.strip():
        raise MalformedJsonError(
            "Payload is empty or whitespace-only",
            raw_content=text,
            parse_error="Empty content",
        )

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(
            f"Failed to parse payload as JSON: {e.msg}",
            raw_content=text,
            parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedJsonError(
            f"Payload is not a JSON object (got {json_type_name(parsed)})",
            raw_content=text,
            parse_error=f"Expected object, got {json_type_name(parsed)}",
        )
    return parsed


def _from_pydantic_error(exc: PydanticValidationError, model_name: str) -> SchemaError:
    """Map the most relevant pydantic error onto a SchemaError."""
    errors = exc.errors()
    messages = [
        f"{'.'.join(str(loc) for loc in err['loc']) or 'root'}: {err['msg']}"
        for err in errors
    ]

    # A missing field is the most actionable report, prefer it
    missing = [err for err in errors if err["type"] == "missing"]
    if missing:
        field = ".".join(str(loc) for loc in missing[0]["loc"])
        return MissingFieldError(field, model=model_name, errors=messages)

    first = errors[0]
    field = ".".join(str(loc) for loc in first["loc"]) or "root"
    expected = _EXPECTED_TYPES.get(first["type"], first["type"])
    return TypeMismatchError(
        field,
        expected=expected,
        actual=json_type_name(first.get("input")),
        model=model_name,
        errors=messages,
    )


def _model_from_json(text: str, model_type: type[ModelT]) -> ModelT:
    # strict: no coercion of "1024" into 1024 or of epoch numbers into datetimes
    try:
        return model_type.model_validate_json(text, strict=True)
    except PydanticValidationError as e:
        raise _from_pydantic_error(e, model_type.__name__) from e


def check_generation(raw: dict[str, Any]) -> int:
    """
    Read and check the generation tag of a raw envelope.

    Raises:
        MissingFieldError: No generation tag
        TypeMismatchError: Tag is not an integer
        IncompatibleGenerationError: Tag outside the readable range
    """
    if GENERATION_FIELD not in raw:
        raise MissingFieldError(GENERATION_FIELD, model="SchemaEnvelope")

    generation = raw[GENERATION_FIELD]
    if isinstance(generation, bool) or not isinstance(generation, int):
        raise TypeMismatchError(
            GENERATION_FIELD,
            expected="integer",
            actual=json_type_name(generation),
            model="SchemaEnvelope",
        )

    supported = supported_generations()
    if generation not in supported:
        raise IncompatibleGenerationError(generation, supported)
    return generation


def decode(data: bytes | str, model_type: type[ModelT]) -> ModelT:
    """
    Decode wire bytes into a model instance.

    Args:
        data: JSON bytes (or text)
        model_type: Model class to decode into

    Returns:
        Decoded instance, unknown fields preserved in ``model_extra``

    Raises:
        SchemaError: MalformedJsonError, MissingFieldError or TypeMismatchError
    """
    text = _load_text(data)
    _load_object(text)
    return _model_from_json(text, model_type)


def decode_envelope(data: bytes | str, payload_type: type[ModelT]) -> SchemaEnvelope[ModelT]:
    """
    Decode a generation-tagged envelope.

    The generation is checked before anything else is interpreted, so a
    payload from an unreadable generation always fails closed.

    Raises:
        SchemaError: Any of the SchemaError subclasses
    """
    text = _load_text(data)
    generation = check_generation(_load_object(text))
    envelope_type = SchemaEnvelope[payload_type]  # type: ignore[valid-type]
    envelope = _model_from_json(text, envelope_type)
    logger.debug("Decoded %s envelope (generation %s)", payload_type.__name__, generation)
    return envelope


class SchemaCodec:
    """
    Minimal, network-free interface to the wire format.

    Bundles encode/decode, rule validation and structural schema
    generation. The full client composes this; tools that only emit
    schema-conformant data can use it on its own.
    """

    def __init__(self, validator: ValidationPipeline | None = None):
        self.validator = validator or ValidationPipeline()

    def encode(self, instance: BaseModel) -> bytes:
        return encode(instance)

    def decode(self, data: bytes | str, model_type: type[ModelT]) -> ModelT:
        return decode(data, model_type)

    def decode_envelope(self, data: bytes | str, payload_type: type[ModelT]) -> SchemaEnvelope[ModelT]:
        return decode_envelope(data, payload_type)

    def validate(self, instance: BaseModel) -> None:
        """Raise the first rule violation of ``instance`` (fail-fast)."""
        self.validator.validate(instance)

    def json_schema(self, model_type: type[BaseModel]) -> dict[str, Any]:
        return json_schema(model_type)

    def envelope_schema(self, payload_type: type[BaseModel]) -> dict[str, Any]:
        return envelope_schema(payload_type)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(generation={SCHEMA_GENERATION})"
