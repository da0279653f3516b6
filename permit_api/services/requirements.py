# This project was developed with assistance from AI tools.
"""Document requirement registry backed by the license catalog service.

The catalog owns license types and, per license type, the ordered list of
document requirements (mandatory or optional). Responses are cached for
``CATALOG_CACHE_TTL`` seconds. Outside production an unreachable catalog
degrades to built-in sample data so local development works offline.
"""

import logging
import time
from typing import Protocol

import httpx

from ..core.config import Settings
from ..schemas.requirement import LicenseType, Requirement
from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

_CATALOG = "License catalog"


class RequirementRegistry(Protocol):
    """Read access to license types and their document requirements."""

    async def get_license_types(self) -> list[LicenseType]: ...

    async def license_type_exists(self, license_type_id: int) -> bool: ...

    async def get_requirements(self, license_type_id: int) -> list[Requirement]: ...


class StaticRequirementRegistry:
    """Registry over in-memory reference data."""

    def __init__(self, license_types: list[LicenseType], requirements: list[Requirement]):
        self._license_types = list(license_types)
        self._requirements = list(requirements)

    async def get_license_types(self) -> list[LicenseType]:
        return list(self._license_types)

    async def license_type_exists(self, license_type_id: int) -> bool:
        return any(lt.id == license_type_id for lt in self._license_types)

    async def get_requirements(self, license_type_id: int) -> list[Requirement]:
        return [r for r in self._requirements if r.license_type_id == license_type_id]


# Sample catalog used when the real one is unreachable outside production.
DEV_FALLBACK = StaticRequirementRegistry(
    license_types=[
        LicenseType(id=1, code="SAMPLE-01", name="Lesen Perniagaan Makanan",
                    category="Berisiko", processing_fee=150.00),
        LicenseType(id=2, code="SAMPLE-02", name="Lesen Kedai Runcit",
                    category="Tidak Berisiko", processing_fee=100.00),
        LicenseType(id=3, code="SAMPLE-03", name="Lesen Perkhidmatan",
                    category="Tidak Berisiko", processing_fee=120.00),
    ],
    requirements=[
        Requirement(id=1, license_type_id=1, name="Salinan Pendaftaran SSM",
                    description="Copy of SSM registration certificate"),
        Requirement(id=2, license_type_id=1, name="Gambar Premis Perniagaan",
                    description="Photos of business premises"),
        Requirement(id=3, license_type_id=1, name="Sijil Kesihatan",
                    description="Health certificate for food handlers"),
        Requirement(id=4, license_type_id=2, name="Salinan Pendaftaran SSM",
                    description="Copy of SSM registration certificate"),
        Requirement(id=5, license_type_id=2, name="Pelan Susun Atur Kedai",
                    description="Shop layout plan"),
        Requirement(id=6, license_type_id=3, name="Salinan Pendaftaran SSM",
                    description="Copy of SSM registration certificate"),
        Requirement(id=7, license_type_id=3, name="Sijil Kelayakan",
                    description="Professional competency certificate"),
    ],
)


class CatalogRequirementRegistry:
    """HTTP client for the license catalog with a TTL cache."""

    def __init__(
        self,
        base_url: str,
        *,
        cache_ttl: int = 900,
        timeout: float = 10.0,
        fallback: StaticRequirementRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._cache_ttl = cache_ttl
        self._timeout = timeout
        self._fallback = fallback
        self._transport = transport
        self._cache: dict[str, tuple[float, list[dict]]] = {}

    async def _get_data(self, path: str) -> list[dict]:
        """GET ``path`` and return its ``data`` list, served from cache when fresh."""
        now = time.monotonic()
        cached = self._cache.get(path)
        if cached is not None and (now - cached[0]) <= self._cache_ttl:
            return cached[1]

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(f"{self._base_url}{path}")
            response.raise_for_status()
            data = response.json().get("data", [])

        self._cache[path] = (now, data)
        return data

    async def get_license_types(self) -> list[LicenseType]:
        try:
            data = await self._get_data("/jenis-lesen")
        except httpx.HTTPError as exc:
            if self._fallback is None:
                logger.error("License catalog unavailable fetching license types: %s", exc)
                raise ExternalServiceError(_CATALOG, "Failed to fetch license types") from exc
            logger.warning("License catalog unavailable (%s); using fallback license types", exc)
            return await self._fallback.get_license_types()
        return [LicenseType.model_validate(item) for item in data]

    async def license_type_exists(self, license_type_id: int) -> bool:
        return any(lt.id == license_type_id for lt in await self.get_license_types())

    async def get_requirements(self, license_type_id: int) -> list[Requirement]:
        try:
            data = await self._get_data(f"/jenis-lesen/{license_type_id}/keperluan-dokumen")
        except httpx.HTTPError as exc:
            if self._fallback is None:
                logger.error(
                    "License catalog unavailable fetching requirements for license type %s: %s",
                    license_type_id,
                    exc,
                )
                raise ExternalServiceError(_CATALOG, "Failed to fetch document requirements") from exc
            logger.warning(
                "License catalog unavailable (%s); using fallback requirements for license type %s",
                exc,
                license_type_id,
            )
            return await self._fallback.get_requirements(license_type_id)
        # Items may omit the license type; it is implied by the request path
        return [
            Requirement.model_validate({"jenis_lesen_id": license_type_id, **item}) for item in data
        ]


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_registry: CatalogRequirementRegistry | None = None


def init_requirement_registry(cfg: Settings) -> CatalogRequirementRegistry:
    """Initialise the singleton (called once from app lifespan)."""
    global _registry  # noqa: PLW0603
    fallback = None if cfg.APP_ENV == "production" else DEV_FALLBACK
    _registry = CatalogRequirementRegistry(
        cfg.LICENSE_CATALOG_URL,
        cache_ttl=cfg.CATALOG_CACHE_TTL,
        timeout=cfg.CATALOG_TIMEOUT,
        fallback=fallback,
    )
    logger.info(
        "License catalog registry initialised (url=%s, fallback=%s)",
        cfg.LICENSE_CATALOG_URL,
        "on" if fallback else "off",
    )
    return _registry


def get_requirement_registry() -> CatalogRequirementRegistry:
    """Return the initialised registry singleton."""
    if _registry is None:
        raise RuntimeError(
            "Requirement registry not initialised -- call init_requirement_registry() first"
        )
    return _registry
