"""
Cloudinary Storage Service Implementation

Uploads images with Cloudinary's signed upload REST endpoint:

    POST https://api.cloudinary.com/v1_1/{cloud_name}/image/upload

Signing: every request parameter except ``file`` and ``api_key`` is sorted,
joined as ``key=value`` pairs with ``&``, suffixed with the API secret and
hashed with SHA-1.

Transport errors, timeouts and 5xx answers are retried up to
``upload_max_retries`` attempts with exponential backoff. Anything else,
or running out of attempts, is reported as ``UpstreamError``.

Version: 1.0.0
"""

import asyncio
import hashlib
import logging
import time
from typing import Optional

import httpx

from digital_menu.core.config import get_settings
from digital_menu.core.exceptions import UpstreamError
from digital_menu.services.storage.base import BaseStorageService, UploadResult

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Compute the Cloudinary request signature for ``params``."""
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{payload}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryStorageService(BaseStorageService):
    """
    Production image host.

    Example:
        >>> service = CloudinaryStorageService()
        >>> result = await service.upload(data, "paneer.jpg", "image/jpeg")
        >>> result.url
        'https://res.cloudinary.com/demo/image/upload/v1/digital-menu/abc.jpg'
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize from explicit arguments, falling back to settings.

        Raises:
            ValueError: If any Cloudinary credential is missing
        """
        settings = get_settings()

        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or settings.cloudinary_api_secret
        self.folder = folder or settings.cloudinary_folder
        self.timeout = timeout or settings.upload_timeout_seconds
        self.max_retries = max_retries or settings.upload_max_retries
        self.backoff = backoff
        self._transport = transport

        if not (self.cloud_name and self.api_key and self.api_secret):
            raise ValueError(
                "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET "
                "are required outside development mode."
            )

        logger.info(f"CloudinaryStorageService initialized (cloud={self.cloud_name})")

    @property
    def provider_name(self) -> str:
        return "cloudinary"

    @property
    def upload_url(self) -> str:
        return f"{API_BASE_URL}/{self.cloud_name}/image/upload"

    def _signed_form(self) -> dict[str, str]:
        params = {
            "folder": self.folder,
            "timestamp": str(int(time.time())),
        }
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return params

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        last_error = "no attempt made"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    response = await client.post(
                        self.upload_url,
                        data=self._signed_form(),
                        files=files,
                    )
                except httpx.TransportError as e:
                    # Timeouts are transport errors too
                    last_error = f"{type(e).__name__}: {e}"
                    logger.warning(
                        f"Cloudinary upload attempt {attempt}/{self.max_retries} failed: {last_error}"
                    )
                else:
                    if response.status_code < 400:
                        try:
                            body = response.json()
                        except ValueError:
                            logger.error(
                                f"Cloudinary sent a non-JSON reply for {filename}: {response.text[:200]}"
                            )
                            raise UpstreamError("Upload failed")
                        url = body.get("secure_url") or body.get("url")
                        if not url:
                            raise UpstreamError("Upload failed")
                        logger.info(f"Cloudinary stored {filename} as {body.get('public_id')}")
                        return UploadResult(
                            url=url,
                            public_id=body.get("public_id"),
                            bytes=body.get("bytes"),
                            attempts=attempt,
                        )

                    last_error = f"HTTP {response.status_code}: {response.text[:200]}"
                    if response.status_code < 500:
                        logger.error(f"Cloudinary rejected upload of {filename}: {last_error}")
                        raise UpstreamError("Upload failed")
                    logger.warning(
                        f"Cloudinary upload attempt {attempt}/{self.max_retries} failed: {last_error}"
                    )

                if attempt < self.max_retries:
                    await asyncio.sleep(self.backoff * (2 ** (attempt - 1)))

        logger.error(f"Cloudinary upload of {filename} gave up: {last_error}")
        raise UpstreamError("Upload failed")

    async def health_check(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)
