"""
Wire codec and structural schema.

- codec.py: encode/decode, envelope decoding, SchemaCodec
- json_schema.py: JSON Schema generation and contract checks
- exceptions.py: SchemaError family
"""

from .codec import SchemaCodec, check_generation, decode, decode_envelope, encode, wrap
from .exceptions import (
    IncompatibleGenerationError,
    MalformedJsonError,
    MissingFieldError,
    SchemaError,
    TypeMismatchError,
)
from .json_schema import check_against_schema, envelope_schema, json_schema, schema_document

__all__ = [
    "SchemaCodec",
    "encode",
    "decode",
    "decode_envelope",
    "check_generation",
    "wrap",
    "json_schema",
    "envelope_schema",
    "schema_document",
    "check_against_schema",
    "SchemaError",
    "MalformedJsonError",
    "MissingFieldError",
    "TypeMismatchError",
    "IncompatibleGenerationError",
]
