# This project was developed with assistance from AI tools.
"""Document response schemas."""

from datetime import datetime

from permit_db.enums import ValidationStatus
from pydantic import BaseModel, ConfigDict


class DocumentResponse(BaseModel):
    """Document metadata. The storage key is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    requirement_id: int
    filename: str
    mime_type: str
    size_bytes: int
    validation_status: ValidationStatus
    uploaded_by_user_id: str
    created_at: datetime
