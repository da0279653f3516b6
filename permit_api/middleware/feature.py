# This project was developed with assistance from AI tools.
"""Feature gate for the permit application endpoints."""

from fastapi import HTTPException, status

from ..core.config import settings


async def require_permohonan_enabled() -> None:
    """Router-level dependency: answer 404 while the feature is switched off.

    Declared on the router so it resolves before any authentication
    dependency of the endpoint.
    """
    if not settings.PERMOHONAN_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
