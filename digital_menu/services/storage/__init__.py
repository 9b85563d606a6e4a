"""
Storage Service Factory

Usage:
    from digital_menu.services.storage import get_storage_service

    storage = get_storage_service()
    result = await storage.upload(data, "paneer.jpg", "image/jpeg")

Environment Switching:
    - ENV_MODE=development → MockStorageService (no API calls)
    - ENV_MODE=staging / production → CloudinaryStorageService
"""

import logging
from functools import lru_cache

from digital_menu.core.config import get_settings
from digital_menu.services.storage.base import BaseStorageService, UploadResult
from digital_menu.services.storage.cloudinary import CloudinaryStorageService
from digital_menu.services.storage.mock import MockStorageService

logger = logging.getLogger(__name__)


@lru_cache()
def get_storage_service() -> BaseStorageService:
    """Get the configured storage service instance (cached)."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Storage Service: Using MockStorageService (development mode)")
        return MockStorageService(
            folder=settings.cloudinary_folder,
            failure_rate=settings.mock_failure_rate,
        )
    else:
        logger.info(
            f"Storage Service: Using CloudinaryStorageService "
            f"({settings.env_mode.value} mode)"
        )
        return CloudinaryStorageService()


def reset_storage_service() -> None:
    """Clear the cached storage service instance."""
    get_storage_service.cache_clear()
    logger.debug("Storage service cache cleared")


__all__ = [
    "get_storage_service",
    "reset_storage_service",
    "BaseStorageService",
    "UploadResult",
    "MockStorageService",
    "CloudinaryStorageService",
]
