"""Tests for collection image upload and asset serving."""

from httpx import AsyncClient

from nexusnft.main import app
from nexusnft.models.failure import UpstreamUnavailableError
from nexusnft.storage import LocalAssetStore, StoredAsset, get_asset_store

CONTRACT = "0x" + "AB" * 20
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class TestUpload:
    async def test_upload_stores_image(
        self, client: AsyncClient, asset_store: LocalAssetStore
    ) -> None:
        response = await client.post(
            "/upload",
            data={"contractAddress": CONTRACT, "tokenId": "1"},
            files={"file": ("my logo!.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 200
        data = response.json()
        expected_path = f"collections/{CONTRACT.lower()}/collection-mylogo.png"
        assert data["success"] is True
        assert data["path"] == expected_path
        assert data["url"] == f"http://test/assets/{expected_path}"

        items = await asset_store.list_folder(f"collections/{CONTRACT.lower()}")
        assert [item.path for item in items] == [expected_path]
        assert items[0].content_type == "image/png"
        assert items[0].metadata["contractAddress"] == CONTRACT.lower()
        assert items[0].metadata["originalName"] == "my logo!.png"
        assert items[0].metadata["tokenId"] == "1"

    async def test_upload_is_served(self, client: AsyncClient) -> None:
        upload = await client.post(
            "/upload",
            data={"contractAddress": CONTRACT},
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        response = await client.get(upload.json()["url"])

        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"

    async def test_reupload_replaces(
        self, client: AsyncClient, asset_store: LocalAssetStore
    ) -> None:
        for payload in (b"first", b"second"):
            await client.post(
                "/upload",
                data={"contractAddress": CONTRACT},
                files={"file": ("logo.png", payload, "image/png")},
            )

        content = await asset_store.read(f"collections/{CONTRACT.lower()}/collection-logo.png")
        assert content.data == b"second"

    async def test_upload_feeds_metadata(self, client: AsyncClient) -> None:
        await client.post(
            "/upload",
            data={"contractAddress": CONTRACT},
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        response = await client.get("/metadata", params={"contract": CONTRACT, "tokenId": "5"})

        data = response.json()
        assert data["image"].endswith("/collection-logo.png")
        assert data["attributes"][1]["value"] == "Uploaded"

    async def test_missing_file(self, client: AsyncClient) -> None:
        response = await client.post("/upload", data={"contractAddress": CONTRACT})

        assert response.status_code == 400
        assert response.json()["failure"]["message"] == "No file uploaded"

    async def test_missing_contract(self, client: AsyncClient) -> None:
        response = await client.post(
            "/upload",
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 400
        assert response.json()["failure"]["message"] == "Contract address is required"

    async def test_rejects_non_image(self, client: AsyncClient) -> None:
        response = await client.post(
            "/upload",
            data={"contractAddress": CONTRACT},
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["failure"]["kind"] == "invalid_input"
        assert data["failure"]["message"] == "File must be an image"

    async def test_rejects_path_like_contract(
        self, client: AsyncClient, asset_store: LocalAssetStore
    ) -> None:
        response = await client.post(
            "/upload",
            data={"contractAddress": "../x"},
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"
        assert not asset_store.root.exists() or not any(asset_store.root.rglob("*.png"))

    async def test_store_unavailable(
        self, client: AsyncClient, asset_store: LocalAssetStore
    ) -> None:
        class FailingStore(LocalAssetStore):
            async def put(self, path, data, content_type, metadata=None) -> StoredAsset:
                raise UpstreamUnavailableError("Asset store", "bucket offline")

        failing = FailingStore(asset_store.root, "http://test")
        app.dependency_overrides[get_asset_store] = lambda: failing

        response = await client.post(
            "/upload",
            data={"contractAddress": CONTRACT},
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 503
        assert response.json()["failure"]["kind"] == "service_unavailable"


class TestAssets:
    async def test_missing_asset(self, client: AsyncClient) -> None:
        response = await client.get("/assets/collections/nothing/here.png")

        assert response.status_code == 404

    async def test_path_escape_is_not_found(self, client: AsyncClient) -> None:
        response = await client.get("/assets/..%2F..%2Fetc%2Fpasswd")

        assert response.status_code == 404
