"""
Filesystem-backed asset store.

Objects are plain files under a root directory. Content type and custom
metadata are kept in JSON sidecar files under a hidden `.meta` folder so
listings only ever show real objects. Objects are served back through
the service's /assets route.

File I/O runs in worker threads so a slow disk never stalls the event loop.
"""

import asyncio
import json
import logging
from pathlib import Path
from urllib.parse import quote

from nexusnft.models.failure import UpstreamUnavailableError
from nexusnft.storage.base import AssetContent, AssetStore, StoredAsset

logger = logging.getLogger(__name__)

META_DIR = ".meta"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LocalAssetStore(AssetStore):
    """Asset store rooted at a local directory."""

    def __init__(self, root: Path, public_url: str):
        self.root = root
        self.public_url = public_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        """Map an object path to a file, refusing paths that escape the root."""
        root = self.root.resolve()
        target = (root / path).resolve()
        if target != root and root not in target.parents:
            raise FileNotFoundError(path)
        if META_DIR in Path(path).parts:
            raise FileNotFoundError(path)
        return target

    def _sidecar(self, path: str) -> Path:
        return self.root / META_DIR / f"{path}.json"

    def _load_sidecar(self, path: str) -> dict[str, object]:
        """
        Read the sidecar of an object.

        Raises:
            UpstreamUnavailableError: If the sidecar is unreadable or not a JSON object
        """
        sidecar = self._sidecar(path)
        if not sidecar.exists():
            return {}
        try:
            with open(sidecar, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise UpstreamUnavailableError("Asset store", f"Corrupt sidecar for {path}: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Asset store", f"Corrupt sidecar for {path}")
        return data

    # --- Blocking implementations ---

    def _list_folder(self, folder: str) -> list[StoredAsset]:
        directory = self._resolve(folder.strip("/"))
        if not directory.is_dir():
            return []

        try:
            files = sorted(p for p in directory.iterdir() if p.is_file())
        except OSError as e:
            raise UpstreamUnavailableError("Asset store", str(e)) from e

        assets: list[StoredAsset] = []
        for file in files:
            path = f"{folder.strip('/')}/{file.name}"
            meta = self._load_sidecar(path)
            content_type = meta.get("contentType")
            custom = meta.get("metadata")
            assets.append(
                StoredAsset(
                    path=path,
                    content_type=content_type if isinstance(content_type, str) else None,
                    metadata=dict(custom) if isinstance(custom, dict) else {},
                )
            )
        return assets

    def _put(self, path: str, data: bytes, content_type: str, metadata: dict[str, str]) -> None:
        target = self._resolve(path)
        sidecar = self._sidecar(path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            sidecar.parent.mkdir(parents=True, exist_ok=True)
            with open(sidecar, "w", encoding="utf-8") as f:
                json.dump({"contentType": content_type, "metadata": metadata}, f)
        except OSError as e:
            raise UpstreamUnavailableError("Asset store", str(e)) from e

    def _download_url(self, path: str) -> str:
        if not self._resolve(path).is_file():
            raise FileNotFoundError(path)
        return f"{self.public_url}/assets/{quote(path)}"

    def _read(self, path: str) -> AssetContent:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(path)

        try:
            data = target.read_bytes()
        except OSError as e:
            raise UpstreamUnavailableError("Asset store", str(e)) from e

        content_type = self._load_sidecar(path).get("contentType")
        return AssetContent(
            data=data,
            content_type=content_type if isinstance(content_type, str) else DEFAULT_CONTENT_TYPE,
        )

    # --- AssetStore ---

    async def list_folder(self, folder: str) -> list[StoredAsset]:
        return await asyncio.to_thread(self._list_folder, folder)

    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> StoredAsset:
        await asyncio.to_thread(self._put, path, data, content_type, metadata or {})
        logger.info("Stored %d bytes at %s", len(data), path)
        return StoredAsset(path=path, content_type=content_type, metadata=dict(metadata or {}))

    async def download_url(self, path: str) -> str:
        return await asyncio.to_thread(self._download_url, path)

    async def read(self, path: str) -> AssetContent:
        return await asyncio.to_thread(self._read, path)
