"""
Health check routes for monitoring.
"""
from fastapi import APIRouter
from src.core import config

router = APIRouter(prefix="/v1/api", tags=["Health"])


@router.get("/health")
async def health_check():
    """Liveness probe; does not touch S3 or DynamoDB."""
    return {
        "status": "healthy",
        "service": config.settings.api_title,
        "version": config.settings.api_version,
        "environment": config.settings.environment
    }
