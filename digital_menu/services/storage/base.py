"""
Storage Service Abstract Base Class

Defines the interface for the third-party media host that stores
dish images. The application only ever hands over bytes and keeps the
public URL that comes back.

Design Pattern: Strategy Pattern
    - MockStorageService for development (no network)
    - CloudinaryStorageService for staging / production

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        url: Public HTTPS URL of the stored image
        public_id: Provider-side identifier of the asset
        bytes: Size reported by the provider
        attempts: Number of requests it took
    """
    url: str
    public_id: Optional[str] = None
    bytes: Optional[int] = None
    attempts: int = 1


class BaseStorageService(ABC):
    """
    Abstract base class for image storage services.

    Implementations raise ``UpstreamError`` when the image cannot be
    stored; they never return a partial result.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "cloudinary")."""
        pass

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> UploadResult:
        """
        Store an image.

        Args:
            data: Raw file content
            filename: Original client-side file name
            content_type: MIME type reported by the client

        Returns:
            UploadResult with the public URL

        Raises:
            UpstreamError: If the provider rejected or never acknowledged
                the upload
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the provider is configured and reachable."""
        pass
