# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads exchanged with the dependency services (camelCase JSON)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(BaseModel):
    """Offset-based pagination metadata for list responses."""

    total: int
    offset: int
    limit: int
    has_more: bool
