# This project was developed with assistance from AI tools.
"""Application request/response schemas.

Request bodies accept the Malay field names the existing UI sends
(``jenis_lesen_id``, ``butiran_operasi`` ...) as aliases. Required-ness of
the operational details is enforced by the lifecycle service so that every
missing field is reported in one response.
"""

from datetime import datetime

from permit_db.enums import ApplicationStatus, CompanyStatus
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from . import PageMeta
from .document import DocumentResponse


class PremiseAddress(BaseModel):
    """Premise address (alamat premis)."""

    model_config = ConfigDict(populate_by_name=True)

    line1: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("line1", "alamat_1")
    )
    line2: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("line2", "alamat_2")
    )
    city: str | None = Field(
        default=None, max_length=100, validation_alias=AliasChoices("city", "bandar")
    )
    postcode: str | None = Field(
        default=None, max_length=10, validation_alias=AliasChoices("postcode", "poskod")
    )
    state: str | None = Field(
        default=None, max_length=100, validation_alias=AliasChoices("state", "negeri")
    )


class OperationalDetails(BaseModel):
    """Business operation details (butiran operasi)."""

    model_config = ConfigDict(populate_by_name=True)

    premise_address: PremiseAddress | None = Field(
        default=None, validation_alias=AliasChoices("premise_address", "alamat_premis")
    )
    business_name: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("business_name", "nama_perniagaan"),
    )
    operation_type: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("operation_type", "jenis_operasi"),
    )
    employee_count: int | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("employee_count", "bilangan_pekerja")
    )
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes", "catatan"))


class ApplicationCreate(BaseModel):
    """Create a new draft application."""

    model_config = ConfigDict(populate_by_name=True)

    company_id: int | None = None
    license_type_id: int | None = Field(
        default=None, validation_alias=AliasChoices("license_type_id", "jenis_lesen_id")
    )
    operational_details: OperationalDetails | None = Field(
        default=None, validation_alias=AliasChoices("operational_details", "butiran_operasi")
    )


class ApplicationUpdate(ApplicationCreate):
    """Whole-object update of a draft.

    ``license_type_id`` and ``operational_details`` replace the stored values
    wholesale and must be resent in full. Omitting ``company_id`` keeps the
    current company.
    """


class CancelRequest(BaseModel):
    """Optional free-text reason recorded with the cancellation event."""

    reason: str | None = Field(default=None, max_length=500)


class CompanySummary(BaseModel):
    """Company info nested inside application responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    registration_no: str
    status: CompanyStatus


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_user_id: str
    company_id: int
    license_type_id: int
    status: ApplicationStatus
    operational_details: OperationalDetails | None = None
    submitted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationDetailResponse(ApplicationResponse):
    """Application with its documents and company summary."""

    documents: list[DocumentResponse] = []
    company: CompanySummary | None = None


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    meta: PageMeta
