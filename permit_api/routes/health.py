# This project was developed with assistance from AI tools.
"""Liveness and database health."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from permit_db import get_db_service

from ..core.config import settings

router = APIRouter()


@router.get("/")
async def health() -> JSONResponse:
    """Report service and database status; 503 when the database is down."""
    database_ok = await get_db_service().health_check()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "degraded",
            "service": settings.APP_NAME,
            "permohonan_enabled": settings.PERMOHONAN_ENABLED,
            "database": "up" if database_ok else "down",
        },
    )
