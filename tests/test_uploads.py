import hashlib

import httpx
import pytest

from digital_menu.core.exceptions import UpstreamError
from digital_menu.services.storage import MockStorageService
from digital_menu.services.storage.cloudinary import CloudinaryStorageService, sign_params

JPEG = b"\xff\xd8\xff\xe0" + b"0" * 64


def cloudinary(handler, max_retries=3):
    return CloudinaryStorageService(
        cloud_name="demo",
        api_key="key-123",
        api_secret="s3cret",
        folder="tests",
        timeout=1,
        max_retries=max_retries,
        backoff=0,
        transport=httpx.MockTransport(handler),
    )


def ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/tests/abc.jpg",
            "public_id": "tests/abc",
            "bytes": 68,
        },
    )


# =============================================================================
# CLOUDINARY
# =============================================================================

def test_signature():
    params = {"timestamp": "1700000000", "folder": "tests"}
    expected = hashlib.sha1(b"folder=tests&timestamp=1700000000s3cret").hexdigest()
    assert sign_params(params, "s3cret") == expected


def test_credentials_required():
    with pytest.raises(ValueError):
        CloudinaryStorageService(cloud_name="demo", api_key="", api_secret="")


async def test_signed_upload():
    seen = []

    def handler(request):
        seen.append(request)
        return ok(request)

    result = await cloudinary(handler).upload(JPEG, "paneer.jpg", "image/jpeg")

    assert result.url.startswith("https://res.cloudinary.com/")
    assert result.attempts == 1
    request = seen[0]
    assert request.url == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert b'name="signature"' in request.content
    assert b'name="api_key"' in request.content
    assert b"s3cret" not in request.content


async def test_retries_server_errors_then_succeeds():
    statuses = iter([503, 500])

    def handler(request):
        status = next(statuses, None)
        if status is None:
            return ok(request)
        return httpx.Response(status, text="unavailable")

    result = await cloudinary(handler).upload(JPEG, "paneer.jpg", "image/jpeg")

    assert result.attempts == 3


async def test_retries_transport_errors():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectTimeout("timed out", request=request)
        return ok(request)

    result = await cloudinary(handler).upload(JPEG, "paneer.jpg", "image/jpeg")

    assert result.attempts == 2


async def test_gives_up_after_retry_budget():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(UpstreamError):
        await cloudinary(handler, max_retries=2).upload(JPEG, "paneer.jpg", "image/jpeg")
    assert len(calls) == 2


async def test_non_json_reply_is_upstream_error():
    def handler(request):
        return httpx.Response(200, text="<html>proxy</html>")

    with pytest.raises(UpstreamError):
        await cloudinary(handler).upload(JPEG, "paneer.jpg", "image/jpeg")


async def test_client_error_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(401, json={"error": {"message": "Invalid Signature"}})

    with pytest.raises(UpstreamError):
        await cloudinary(handler).upload(JPEG, "paneer.jpg", "image/jpeg")
    assert len(calls) == 1


# =============================================================================
# MOCK + HTTP
# =============================================================================

async def test_mock_upload_keeps_extension():
    result = await MockStorageService(folder="tests").upload(JPEG, "Paneer.PNG", "image/png")

    assert result.url.startswith("https://media.mock.local/image/upload/tests/")
    assert result.url.endswith(".png")


async def test_mock_upload_failure():
    with pytest.raises(UpstreamError):
        await MockStorageService(failure_rate=1.0).upload(JPEG, "paneer.jpg")


async def test_upload_endpoint(client):
    response = await client.post(
        "/uploads", files={"file": ("paneer.jpg", JPEG, "image/jpeg")}
    )

    assert response.status_code == 200
    assert response.json()["url"].startswith("https://media.mock.local/")


async def test_upload_endpoint_rejects_non_images(client):
    response = await client.post(
        "/uploads", files={"file": ("notes.txt", b"hello", "text/plain")}
    )
    assert response.status_code == 400

    response = await client.post(
        "/uploads", files={"file": ("empty.jpg", b"", "image/jpeg")}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


async def test_upload_endpoint_requires_file(client):
    response = await client.post("/uploads")
    assert response.status_code == 422
