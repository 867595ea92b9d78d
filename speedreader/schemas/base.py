"""Shared pydantic base classes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SchemaBase(BaseModel):
    """Base schema with ORM attribute support."""

    model_config = ConfigDict(from_attributes=True)


class BoundaryModel(BaseModel):
    """Base for payloads crossing the extractor boundary.

    Accepts both snake_case and the camelCase keys emitted by JavaScript
    extraction workers, and rejects unknown shapes early.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
