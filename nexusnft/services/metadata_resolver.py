"""
Token metadata resolution.

Builds the OpenSea-compatible document for a (contract, token) pair on
every request. Nothing is persisted: the image comes from the
collection's uploaded asset when one exists, otherwise from the
deterministic image endpoint.

The "Created" attribute is stamped with the resolution time, so two
resolutions of the same token differ in that one field.
"""

import logging
import time

from nexusnft.models.failure import (
    InvalidMetadataError,
    MissingParameterError,
    UpstreamUnavailableError,
)
from nexusnft.models.metadata import MetadataAttribute, NFTMetadata, validate_metadata
from nexusnft.services.collection_assets import find_collection_image
from nexusnft.storage.base import AssetStore

logger = logging.getLogger(__name__)

IMAGE_TYPE_UPLOADED = "Uploaded"
IMAGE_TYPE_GENERATED = "Generated"

NO_STORE = "no-cache, no-store, must-revalidate"
IMMUTABLE = "public, max-age=31536000, immutable"


def metadata_base_uri(api_url: str, contract_address: str) -> str:
    """Base URI a collection should point at so token URIs hit this service."""
    return f"{api_url.rstrip('/')}/metadata?contract={contract_address}&tokenId="


def generated_image_url(api_url: str, token_id: str) -> str:
    """URL of the synthesized image for a token."""
    return f"{api_url.rstrip('/')}/image/{token_id}"


async def find_uploaded_image(store: AssetStore, contract_address: str) -> str | None:
    """
    Resolve the URL of a collection's uploaded image.

    Store failures are logged and treated as "no upload" so the caller
    falls back to the generated image.
    """
    try:
        asset = await find_collection_image(store, contract_address)
        if asset is None:
            logger.info("No collection image found for %s", contract_address.lower())
            return None
        return await store.download_url(asset.path)
    except (UpstreamUnavailableError, FileNotFoundError) as e:
        logger.warning("Collection image lookup failed for %s: %s", contract_address, e)
        return None


def build_metadata(
    token_id: str,
    image: str,
    uploaded: bool,
    *,
    website_url: str,
    network_name: str,
    now: float | None = None,
) -> NFTMetadata:
    """Assemble the metadata document for a token."""
    created = int(now if now is not None else time.time())
    return NFTMetadata(
        name=f"MyNFT #{token_id}",
        description=f"NFT #{token_id} on the {network_name} network.",
        image=image,
        external_url=f"{website_url.rstrip('/')}/nft/{token_id}",
        attributes=[
            MetadataAttribute(trait_type="Token ID", value=token_id),
            MetadataAttribute(
                trait_type="Image Type",
                value=IMAGE_TYPE_UPLOADED if uploaded else IMAGE_TYPE_GENERATED,
            ),
            MetadataAttribute(display_type="date", trait_type="Created", value=created),
        ],
    )


async def resolve_metadata(
    store: AssetStore,
    contract_address: str | None,
    token_id: str | None,
    *,
    api_url: str,
    website_url: str,
    network_name: str,
    now: float | None = None,
) -> NFTMetadata:
    """
    Resolve the metadata document for a token.

    Raises:
        MissingParameterError: If contract_address or token_id is missing
        InvalidMetadataError: If the assembled document fails validation
    """
    if not contract_address:
        raise MissingParameterError("contract", "Contract address is required")
    if not token_id:
        raise MissingParameterError("tokenId", "Token ID is required")

    uploaded_image = await find_uploaded_image(store, contract_address)
    if uploaded_image is not None:
        image = uploaded_image
    else:
        image = generated_image_url(api_url, token_id)

    metadata = build_metadata(
        token_id,
        image,
        uploaded_image is not None,
        website_url=website_url,
        network_name=network_name,
        now=now,
    )

    problems = validate_metadata(metadata)
    if problems:
        logger.error("Invalid metadata for token %s: %s", token_id, problems)
        raise InvalidMetadataError("; ".join(problems))

    logger.info(
        "Serving metadata for token %s of %s (%s image)",
        token_id,
        contract_address.lower(),
        metadata.attributes[1].value,
    )
    return metadata
