# This project was developed with assistance from AI tools.
"""License catalog reference data, proxied from the requirement registry."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..middleware.auth import CurrentUser
from ..schemas.requirement import LicenseType, Requirement
from ..services.requirements import CatalogRequirementRegistry, get_requirement_registry

router = APIRouter()

Registry = Annotated[CatalogRequirementRegistry, Depends(get_requirement_registry)]


@router.get("/jenis-lesen", response_model=list[LicenseType])
async def list_license_types(user: CurrentUser, registry: Registry) -> list[LicenseType]:
    return await registry.get_license_types()


@router.get("/jenis-lesen/{license_type_id}/keperluan-dokumen", response_model=list[Requirement])
async def list_requirements(
    license_type_id: int,
    user: CurrentUser,
    registry: Registry,
) -> list[Requirement]:
    """Document requirements of one license type, mandatory ones flagged."""
    return await registry.get_requirements(license_type_id)
