"""Integration tests for admin product image uploads."""

import re

import pytest

MB = 1024 * 1024


def image_file(size: int, content_type: str = "image/jpeg", name: str = "loaf.jpg"):
    return {"image": (name, b"\xff" * size, content_type)}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_jpeg(client, auth, admin, image_storage):
    auth.login(admin)

    response = await client.post("/api/upload/image", files=image_file(int(4.9 * MB)))

    assert response.status_code == 200, response.text
    data = response.json()
    assert re.fullmatch(r"product_\d+_[a-z0-9]+\.jpg", data["fileName"])
    assert data["imageUrl"].endswith(data["fileName"])
    assert len(image_storage.files[data["fileName"]]) == int(4.9 * MB)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_oversized_upload_rejected_before_storage(client, auth, admin, image_storage):
    auth.login(admin)

    response = await client.post("/api/upload/image", files=image_file(6 * MB))

    assert response.status_code == 400
    assert response.json() == {
        "error": "File too large. Please upload images smaller than 5MB."
    }
    assert image_storage.files == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_wrong_type_rejected(client, auth, admin, image_storage):
    auth.login(admin)

    response = await client.post(
        "/api/upload/image", files=image_file(1024, "image/gif", "loaf.gif")
    )

    assert response.status_code == 400
    assert "Invalid file type" in response.json()["error"]
    assert image_storage.files == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_file_rejected(client, auth, admin):
    auth.login(admin)
    response = await client.post("/api/upload/image", data={"other": "x"})
    assert response.status_code == 400
    assert response.json() == {"error": "No image file provided"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_upload(client, auth, customer, image_storage):
    auth.login(customer)
    response = await client.post("/api/upload/image", files=image_file(1024))
    assert response.status_code == 403
    assert image_storage.files == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_storage_failure_is_500(client, auth, admin, image_storage):
    auth.login(admin)
    image_storage.fail = True

    response = await client.post("/api/upload/image", files=image_file(1024))

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to upload image"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_image(client, auth, admin, image_storage):
    auth.login(admin)
    image_storage.files["product_1_abc.jpg"] = b"x"

    response = await client.delete(
        "/api/upload/image", params={"fileName": "product_1_abc.jpg"}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert image_storage.deleted == ["product_1_abc.jpg"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_requires_file_name(client, auth, admin):
    auth.login(admin)

    missing = await client.delete("/api/upload/image")
    too_long = await client.delete("/api/upload/image", params={"fileName": "x" * 101})

    assert missing.json() == {"error": "No file name provided"}
    assert too_long.status_code == 400
