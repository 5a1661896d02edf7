"""
Collection image storage conventions.

Each collection owns the folder `collections/<lower-cased address>/` in
the asset store. Its image is the object whose name starts with
`collection-`. Uploads overwrite an object with the same sanitized name
and nothing here ever deletes one.
"""

import logging
import re
import time

from nexusnft.config import COLLECTION_ASSET_PREFIX
from nexusnft.models.failure import InvalidInputError, MissingParameterError
from nexusnft.services.addresses import normalize_address
from nexusnft.storage.base import AssetStore, StoredAsset

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def collection_folder(contract_address: str) -> str:
    """Asset store folder for a collection."""
    return f"collections/{contract_address.lower()}"


def sanitize_filename(filename: str) -> str:
    """Drop every character other than ASCII letters, digits, dots and dashes."""
    return _UNSAFE_FILENAME_CHARS.sub("", filename)


def collection_asset_path(contract_address: str, filename: str) -> str:
    """Full object path for an uploaded collection image."""
    name = f"{COLLECTION_ASSET_PREFIX}{sanitize_filename(filename)}"
    return f"{collection_folder(contract_address)}/{name}"


async def find_collection_image(store: AssetStore, contract_address: str) -> StoredAsset | None:
    """
    Find the collection image for a contract.

    Listings are sorted by name; when several uploads exist the first
    matching one wins.

    Raises:
        UpstreamUnavailableError: If the store cannot be listed
    """
    folder = collection_folder(contract_address)
    items = await store.list_folder(folder)
    logger.debug("Found %d objects under %s", len(items), folder)

    for item in items:
        if item.name.startswith(COLLECTION_ASSET_PREFIX):
            return item
    return None


async def upload_collection_image(
    store: AssetStore,
    contract_address: str | None,
    filename: str | None,
    content_type: str | None,
    data: bytes | None,
    token_id: str | None = None,
) -> tuple[StoredAsset, str]:
    """
    Validate and store a collection image.

    Returns:
        Tuple of (stored asset, retrievable URL)

    Raises:
        MissingParameterError: If the file or contract address is missing
        InvalidInputError: If the file is not an image or the address is malformed
        UpstreamUnavailableError: If the store cannot be written
    """
    if data is None or not filename:
        raise MissingParameterError("file", "No file uploaded")
    if not contract_address:
        raise MissingParameterError("contractAddress", "Contract address is required")
    if not content_type or not content_type.startswith("image/"):
        raise InvalidInputError("File must be an image", detail=content_type)

    address = normalize_address(contract_address, "contractAddress")
    path = collection_asset_path(address, filename)
    metadata = {
        "contractAddress": address,
        "tokenId": token_id or "",
        "originalName": filename,
        "uploadTimestamp": str(int(time.time() * 1000)),
    }

    logger.info(
        "Uploading collection image %s for %s as %s (%d bytes)",
        filename,
        address,
        path,
        len(data),
    )
    asset = await store.put(path, data, content_type, metadata)
    url = await store.download_url(asset.path)
    return asset, url
