# This project was developed with assistance from AI tools.
"""License catalog reference data schemas.

The catalog speaks Malay field names (``nama``, ``wajib`` ...); the aliases
map them onto the English attribute names used throughout the service.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LicenseType(BaseModel):
    """A category of license (jenis lesen)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    code: str | None = Field(default=None, validation_alias=AliasChoices("code", "kod"))
    name: str = Field(validation_alias=AliasChoices("name", "nama"))
    description: str | None = Field(
        default=None, validation_alias=AliasChoices("description", "keterangan")
    )
    category: str | None = Field(default=None, validation_alias=AliasChoices("category", "kategori"))
    processing_fee: float | None = Field(
        default=None, validation_alias=AliasChoices("processing_fee", "yuran_proses")
    )


class Requirement(BaseModel):
    """A document a license type demands (keperluan dokumen)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    license_type_id: int = Field(validation_alias=AliasChoices("license_type_id", "jenis_lesen_id"))
    name: str = Field(validation_alias=AliasChoices("name", "nama"))
    description: str | None = Field(
        default=None, validation_alias=AliasChoices("description", "keterangan")
    )
    mandatory: bool = Field(default=True, validation_alias=AliasChoices("mandatory", "wajib"))
