"""
Versioned wire envelope.

Every request and response body is wrapped in a SchemaEnvelope carrying
the schema generation it was written in. Readers accept generations in
[OLDEST_READABLE_GENERATION, SCHEMA_GENERATION] and refuse anything else.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_GENERATION = 1
OLDEST_READABLE_GENERATION = 1

GENERATION_FIELD = "schema_generation"
GENERATION_HEADER = "X-Schema-Generation"

PayloadT = TypeVar("PayloadT")


def supported_generations() -> range:
    """Generations this client can interpret."""
    return range(OLDEST_READABLE_GENERATION, SCHEMA_GENERATION + 1)


class SchemaEnvelope(BaseModel, Generic[PayloadT]):
    """
    Generation-tagged wrapper around a payload.

    Attributes:
        schema_generation: Wire format generation of the payload
        success: Whether the service reports the operation as successful
        payload: The wrapped entity (absent on failures)
        errors: Error messages reported by the service
        next_page_token: Continuation token for paginated listings
    """

    model_config = ConfigDict(extra="allow")

    schema_generation: int = Field(default=SCHEMA_GENERATION)
    success: bool = True
    payload: Optional[PayloadT] = None
    errors: list[str] = Field(default_factory=list)
    next_page_token: Optional[str] = None
