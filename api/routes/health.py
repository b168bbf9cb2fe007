"""Health check endpoint."""

from fastapi import APIRouter

from glyphvm import __version__
from glyphvm.runtime.rational import BACKENDS

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "service": "glyphvm-api",
        "numeric_backends": sorted(BACKENDS),
    }
