# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel, ConfigDict, Field


class PageMeta(BaseModel):
    """Page-based pagination metadata for list responses."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
