# This project was developed with assistance from AI tools.
"""Tests for the license catalog requirement registry."""

import httpx
import pytest

from permit_api.services.errors import ExternalServiceError
from permit_api.services.requirements import DEV_FALLBACK, CatalogRequirementRegistry

_LICENSE_TYPES = {
    "data": [
        {"id": 1, "kod": "LP-01", "nama": "Lesen Perniagaan Makanan", "yuran_proses": 150.0},
        {"id": 2, "kod": "LP-02", "nama": "Lesen Kedai Runcit"},
    ]
}

_REQUIREMENTS = {
    "data": [
        {"id": 11, "nama": "Salinan SSM", "wajib": True},
        {"id": 12, "nama": "Gambar Premis", "wajib": False},
    ]
}


def _catalog(calls: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path == "/api/jenis-lesen":
            return httpx.Response(200, json=_LICENSE_TYPES)
        if request.url.path == "/api/jenis-lesen/1/keperluan-dokumen":
            return httpx.Response(200, json=_REQUIREMENTS)
        return httpx.Response(404, json={"message": "not found"})

    return httpx.MockTransport(handler)


def _down() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_license_types_parsed_from_malay_payload():
    registry = CatalogRequirementRegistry("http://catalog/api", transport=_catalog([]))

    types = await registry.get_license_types()

    assert [t.id for t in types] == [1, 2]
    assert types[0].name == "Lesen Perniagaan Makanan"
    assert types[0].processing_fee == 150.0
    assert await registry.license_type_exists(2)
    assert not await registry.license_type_exists(3)


@pytest.mark.asyncio
async def test_requirements_carry_license_type_and_mandatory_flag():
    registry = CatalogRequirementRegistry("http://catalog/api", transport=_catalog([]))

    requirements = await registry.get_requirements(1)

    assert [(r.id, r.license_type_id, r.mandatory) for r in requirements] == [
        (11, 1, True),
        (12, 1, False),
    ]


@pytest.mark.asyncio
async def test_responses_are_cached():
    calls: list[str] = []
    registry = CatalogRequirementRegistry("http://catalog/api", transport=_catalog(calls))

    await registry.get_requirements(1)
    await registry.get_requirements(1)
    await registry.get_license_types()

    assert calls == ["/api/jenis-lesen/1/keperluan-dokumen", "/api/jenis-lesen"]


@pytest.mark.asyncio
async def test_expired_cache_refetches():
    calls: list[str] = []
    registry = CatalogRequirementRegistry(
        "http://catalog/api", cache_ttl=-1, transport=_catalog(calls)
    )

    await registry.get_license_types()
    await registry.get_license_types()

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_unreachable_catalog_without_fallback_raises():
    registry = CatalogRequirementRegistry("http://catalog/api", transport=_down())

    with pytest.raises(ExternalServiceError) as exc_info:
        await registry.get_requirements(1)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_error_status_without_fallback_raises():
    registry = CatalogRequirementRegistry("http://catalog/api", transport=_catalog([]))
    with pytest.raises(ExternalServiceError):
        await registry.get_requirements(99)


@pytest.mark.asyncio
async def test_unreachable_catalog_uses_fallback():
    registry = CatalogRequirementRegistry(
        "http://catalog/api", transport=_down(), fallback=DEV_FALLBACK
    )

    requirements = await registry.get_requirements(1)
    types = await registry.get_license_types()

    assert [r.id for r in requirements] == [1, 2, 3]
    assert [t.id for t in types] == [1, 2, 3]
