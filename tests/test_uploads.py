import pytest

from tests.conftest import make_image

PNG_BYTES = make_image(".png")
GLB_BYTES = b"glTF" + b"\x00" * 64


@pytest.fixture
async def building(client, auth_headers):
    resp = await client.post("/api/buildings/", json={"id": "tower-a", "name": "Tower A"}, headers=auth_headers)
    assert resp.status_code == 201
    return resp.json()


def is_webp(content):
    return content[:4] == b"RIFF" and content[8:12] == b"WEBP"


def frame_file(content=PNG_BYTES, content_type="image/png"):
    return {"frame": ("frame.png", content, content_type)}


def model_file(content=GLB_BYTES, filename="tower.glb"):
    return {"model": (filename, content, "model/gltf-binary")}


class TestUploadFrame:

    async def test_uploads_padded_frame(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "5"},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["url"] == "https://assets.example.com/buildings/tower-a/frames/frame_005?v=1"

        upload = asset_store.uploads[0]
        assert is_webp(upload["content"])
        assert upload["folder"] == "buildings/tower-a/frames"
        assert upload["public_id"] == "frame_005"
        assert upload["resource_type"] == "image"
        assert upload["format"] == "webp"
        assert upload["overwrite"] is True
        assert upload["content_type"] == "image/webp"

    async def test_frame_does_not_change_building(self, client, auth_headers, building):
        await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "12"},
            headers=auth_headers,
        )
        fetched = (await client.get("/api/buildings/tower-a")).json()
        assert fetched["modelPath"] is None
        assert fetched["floors"] == []

    async def test_missing_file(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "No frame file provided"}
        assert asset_store.uploads == []

    async def test_missing_frame_number(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Frame number is required"}
        assert asset_store.uploads == []

    async def test_unknown_building(self, client, auth_headers, asset_store):
        resp = await client.post(
            "/api/buildings/missing/upload-frame",
            files=frame_file(),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Building not found"}
        assert asset_store.uploads == []

    async def test_rejects_non_image(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(content=b"%PDF-1.7", content_type="application/pdf"),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert asset_store.uploads == []

    async def test_channel_failure(self, client, auth_headers, asset_store, building):
        asset_store.error = "Upload failed: connection reset"

        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Upload failed: connection reset"}

    async def test_channel_failure_without_message(self, client, auth_headers, asset_store, building):
        asset_store.error = ""

        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Failed to upload frame"}

    async def test_requires_token(self, client, asset_store):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "1"},
        )
        assert resp.status_code == 401
        assert asset_store.uploads == []

    @pytest.mark.parametrize("fmt, content_type", [
        (".jpg", "image/jpeg"),
        (".webp", "image/webp"),
        (".tif", "image/tiff"),
    ])
    async def test_any_image_is_stored_as_webp(self, client, auth_headers, asset_store, building, fmt, content_type):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(content=make_image(fmt), content_type=content_type),
            data={"frameNumber": "2"},
            headers=auth_headers,
        )

        assert resp.status_code == 200
        assert is_webp(asset_store.uploads[0]["content"])
        assert asset_store.uploads[0]["content_type"] == "image/webp"

    async def test_unreadable_image(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(content=b"\x89PNG\r\n\x1a\n" + b"\x00" * 32),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Frame is not a readable image"}
        assert asset_store.uploads == []

    async def test_unexpected_failure(self, client, auth_headers, asset_store, building):
        asset_store.failure = RuntimeError("socket closed")

        resp = await client.post(
            "/api/buildings/tower-a/upload-frame",
            files=frame_file(),
            data={"frameNumber": "1"},
            headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Failed to upload frame"}


class TestUploadModel:

    async def test_sets_model_path(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-model",
            files=model_file(),
            headers=auth_headers,
        )
        assert resp.status_code == 200
        url = resp.json()["url"]
        assert resp.json() == {"url": url}

        upload = asset_store.uploads[0]
        assert upload["folder"] == "buildings/tower-a/models"
        assert upload["public_id"] == "model"
        assert upload["resource_type"] == "raw"
        assert upload["overwrite"] is True

        fetched = (await client.get("/api/buildings/tower-a")).json()
        assert fetched["modelPath"] == url

    async def test_second_upload_overwrites(self, client, auth_headers, asset_store, building):
        first = await client.post(
            "/api/buildings/tower-a/upload-model", files=model_file(), headers=auth_headers,
        )
        second = await client.post(
            "/api/buildings/tower-a/upload-model", files=model_file(), headers=auth_headers,
        )
        assert first.json()["url"] != second.json()["url"]

        fetched = (await client.get("/api/buildings/tower-a")).json()
        assert fetched["modelPath"] == second.json()["url"]
        assert {u["public_id"] for u in asset_store.uploads} == {"model"}

    async def test_missing_file(self, client, auth_headers, building):
        resp = await client.post("/api/buildings/tower-a/upload-model", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json() == {"message": "No file uploaded"}

    async def test_unknown_building(self, client, auth_headers, asset_store):
        resp = await client.post(
            "/api/buildings/missing/upload-model", files=model_file(), headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json() == {"message": "Building not found"}
        assert asset_store.uploads == []

    async def test_rejects_unknown_extension(self, client, auth_headers, asset_store, building):
        resp = await client.post(
            "/api/buildings/tower-a/upload-model",
            files=model_file(filename="tower.exe"),
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert asset_store.uploads == []

    async def test_channel_failure_keeps_record(self, client, auth_headers, asset_store, building):
        asset_store.error = "Upload failed: 403 Forbidden"

        resp = await client.post(
            "/api/buildings/tower-a/upload-model", files=model_file(), headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to upload model"}

        fetched = (await client.get("/api/buildings/tower-a")).json()
        assert fetched["modelPath"] is None

    async def test_unexpected_failure(self, client, auth_headers, asset_store, building):
        asset_store.failure = RuntimeError("socket closed")

        resp = await client.post(
            "/api/buildings/tower-a/upload-model", files=model_file(), headers=auth_headers,
        )
        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to upload model"}

        fetched = (await client.get("/api/buildings/tower-a")).json()
        assert fetched["modelPath"] is None
