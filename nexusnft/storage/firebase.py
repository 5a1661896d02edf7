"""
Firebase Storage asset store.

Talks to the Firebase Storage REST API with httpx:

    GET   /v0/b/{bucket}/o?prefix=...&delimiter=/   list a folder
    POST  /v0/b/{bucket}/o?name=...                 upload an object
    PATCH /v0/b/{bucket}/o/{object}                 set custom metadata
    GET   /v0/b/{bucket}/o/{object}                 object metadata (download tokens)
    GET   /v0/b/{bucket}/o/{object}?alt=media       object bytes

Network errors, 5xx responses and unreadable JSON bodies surface as
UpstreamUnavailableError.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from nexusnft.models.failure import UpstreamUnavailableError
from nexusnft.storage.base import AssetContent, AssetStore, StoredAsset

logger = logging.getLogger(__name__)

SERVICE_NAME = "Firebase Storage"


class FirebaseAssetStore(AssetStore):
    """Asset store backed by a Firebase Storage bucket."""

    def __init__(
        self,
        bucket: str,
        base_url: str = "https://firebasestorage.googleapis.com",
        auth_token: str = "",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self._client = client

    @property
    def _bucket_url(self) -> str:
        return f"{self.base_url}/v0/b/{self.bucket}/o"

    def _object_url(self, path: str) -> str:
        return f"{self._bucket_url}/{quote(path, safe='')}"

    def _headers(self) -> dict[str, str]:
        if not self.auth_token:
            return {}
        return {"Authorization": f"Firebase {self.auth_token}"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(SERVICE_NAME, str(e)) from e

        if response.status_code >= 500:
            raise UpstreamUnavailableError(
                SERVICE_NAME, f"HTTP {response.status_code} - {response.text}"
            )
        return response

    @staticmethod
    def _check(response: httpx.Response, path: str) -> None:
        if response.status_code == 404:
            raise FileNotFoundError(path)
        if not response.is_success:
            raise UpstreamUnavailableError(
                SERVICE_NAME, f"HTTP {response.status_code} - {response.text}"
            )

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(SERVICE_NAME, f"Invalid JSON response: {e}") from e
        if not isinstance(body, dict):
            raise UpstreamUnavailableError(SERVICE_NAME, "Unexpected response shape")
        return body

    async def list_folder(self, folder: str) -> list[StoredAsset]:
        prefix = folder.strip("/") + "/"
        response = await self._request(
            "GET", self._bucket_url, params={"prefix": prefix, "delimiter": "/"}
        )
        if response.status_code == 404:
            return []
        self._check(response, prefix)

        items = self._json(response).get("items") or []
        if not isinstance(items, list):
            raise UpstreamUnavailableError(SERVICE_NAME, "Unexpected listing shape")
        assets = [
            StoredAsset(path=item["name"])
            for item in items
            if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"]
        ]
        return sorted(assets, key=lambda asset: asset.path)

    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> StoredAsset:
        response = await self._request(
            "POST",
            self._bucket_url,
            params={"name": path},
            content=data,
            headers={"Content-Type": content_type},
        )
        self._check(response, path)

        if metadata:
            patch = await self._request(
                "PATCH", self._object_url(path), json={"metadata": metadata}
            )
            self._check(patch, path)

        logger.info("Uploaded %d bytes to gs://%s/%s", len(data), self.bucket, path)
        return StoredAsset(path=path, content_type=content_type, metadata=dict(metadata or {}))

    async def download_url(self, path: str) -> str:
        response = await self._request("GET", self._object_url(path))
        self._check(response, path)

        tokens = self._json(response).get("downloadTokens")
        if not isinstance(tokens, str):
            tokens = ""
        token = tokens.split(",")[0].strip()
        if token:
            return f"{self._object_url(path)}?alt=media&token={token}"
        return f"{self._object_url(path)}?alt=media"

    async def read(self, path: str) -> AssetContent:
        response = await self._request("GET", self._object_url(path), params={"alt": "media"})
        self._check(response, path)
        return AssetContent(
            data=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )
