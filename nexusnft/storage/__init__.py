from functools import lru_cache
from pathlib import Path

from nexusnft.config import settings
from nexusnft.storage.base import AssetContent, AssetStore, StoredAsset
from nexusnft.storage.firebase import FirebaseAssetStore
from nexusnft.storage.local import LocalAssetStore


@lru_cache
def get_asset_store() -> AssetStore:
    """
    Build the configured asset store.

    Used as a FastAPI dependency; tests override it with a store of
    their own.
    """
    if settings.asset_store == "firebase":
        if not settings.firebase_bucket:
            raise ValueError("firebase_bucket must be set when asset_store is 'firebase'")
        return FirebaseAssetStore(
            bucket=settings.firebase_bucket,
            base_url=settings.firebase_base_url,
            auth_token=settings.firebase_auth_token,
        )
    if settings.asset_store == "local":
        return LocalAssetStore(Path(settings.asset_dir), settings.api_url)
    raise ValueError(f"Unknown asset store backend: {settings.asset_store}")


__all__ = [
    "AssetContent",
    "AssetStore",
    "FirebaseAssetStore",
    "LocalAssetStore",
    "StoredAsset",
    "get_asset_store",
]
