# This project was developed with assistance from AI tools.
"""Completeness request/response schemas."""

from permit_db.enums import ValidationStatus
from pydantic import BaseModel


class RequirementStatus(BaseModel):
    """A single requirement with its fulfillment status."""

    requirement_id: int
    name: str
    mandatory: bool
    is_provided: bool = False
    document_id: int | None = None
    validation_status: ValidationStatus | None = None


class CompletenessResponse(BaseModel):
    """Completeness summary for an application."""

    application_id: int
    is_complete: bool
    requirements: list[RequirementStatus]
    missing_requirement_ids: list[int]
    structural_errors: dict[str, str]
    provided_count: int
    required_count: int
