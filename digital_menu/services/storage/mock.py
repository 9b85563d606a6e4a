"""
Mock Storage Service Implementation

Pretends to upload images and returns Cloudinary-shaped URLs on a fake
host. Used in development mode (ENV_MODE=development).

Version: 1.0.0
"""

import asyncio
import logging
import os
import random
import uuid
from typing import Optional

from digital_menu.core.exceptions import UpstreamError
from digital_menu.services.storage.base import BaseStorageService, UploadResult

logger = logging.getLogger(__name__)


class MockStorageService(BaseStorageService):
    """Mock implementation of the image host."""

    BASE_URL = "https://media.mock.local/image/upload"

    def __init__(
        self,
        folder: str = "digital-menu",
        failure_rate: float = 0.0,
        latency: float = 0.0,
    ):
        self.folder = folder
        self.failure_rate = failure_rate
        self.latency = latency
        logger.info(f"MockStorageService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        if self.latency:
            await asyncio.sleep(self.latency)

        if random.random() < self.failure_rate:
            logger.warning(f"Mock upload failed (simulated) for {filename}")
            raise UpstreamError("Upload failed")

        extension = os.path.splitext(filename)[1].lower() or ".jpg"
        public_id = f"{self.folder}/{uuid.uuid4().hex[:20]}"
        url = f"{self.BASE_URL}/{public_id}{extension}"

        logger.info(f"Mock upload stored {filename} ({len(data)} bytes) at {url}")
        return UploadResult(url=url, public_id=public_id, bytes=len(data))

    async def health_check(self) -> bool:
        return True
