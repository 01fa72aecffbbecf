"""Reusable, strict base models for the library."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    A strict, immutable pydantic base model.

    Fields are never coerced from loosely-typed input (e.g. `"3"` is not an int),
    unknown fields are rejected, and instances cannot be mutated after creation.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_default=True,
    )
