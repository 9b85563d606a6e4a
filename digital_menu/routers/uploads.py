"""
Upload Endpoint

Accepts a single image as multipart field ``file`` and returns the public
URL assigned by the image host.
"""

from fastapi import APIRouter, File, UploadFile

from digital_menu.core.config import get_settings
from digital_menu.core.exceptions import ValidationError
from digital_menu.schemas import ErrorResponse, UploadResponse
from digital_menu.services.storage import get_storage_service

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Upload Image",
)
async def upload_image(file: UploadFile = File(...)) -> UploadResponse:
    settings = get_settings()

    if file.content_type and not file.content_type.startswith("image/"):
        raise ValidationError("Only image uploads are accepted")

    data = await file.read(settings.upload_max_bytes + 1)
    if not data:
        raise ValidationError("No file uploaded")
    if len(data) > settings.upload_max_bytes:
        raise ValidationError(
            f"File is larger than {settings.upload_max_bytes // (1024 * 1024)} MB"
        )

    result = await get_storage_service().upload(
        data,
        filename=file.filename or "upload",
        content_type=file.content_type,
    )
    return UploadResponse(url=result.url)
