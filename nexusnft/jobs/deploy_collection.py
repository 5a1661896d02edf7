"""
Deploy a collection from the command line.

Runs the same flow as the web client against a running service: deploy,
point the base URI at the metadata resolver, optionally upload an image
and mint the first token.

Usage:
    python -m nexusnft.jobs.deploy_collection --name "Nexus Test Collection" \
        --owner 0x... [--image logo.png] [--mint]
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import httpx

from nexusnft.client.gallery import DeployResult, GalleryClient, ImageUpload
from nexusnft.client.signer import Signer
from nexusnft.config import settings

logger = logging.getLogger(__name__)


def load_image(path: Path) -> ImageUpload:
    """Read an image file for upload, guessing its content type from the name."""
    content_type, _ = mimetypes.guess_type(path.name)
    return ImageUpload(
        filename=path.name,
        data=path.read_bytes(),
        content_type=content_type or "application/octet-stream",
    )


async def run_deploy(
    name: str,
    owner: str,
    api_url: str,
    image: ImageUpload | None = None,
    mint: bool = False,
    client: httpx.AsyncClient | None = None,
) -> DeployResult | None:
    """
    Deploy a collection and optionally mint its first token.

    Args:
        name: Collection name; the symbol is derived from it
        owner: Address that owns the collection and receives the mint
        api_url: Base URL of the running service
        image: Optional collection image
        mint: Mint token 1 to the owner after deploying
        client: HTTP client to use; one is created when omitted

    Returns:
        DeployResult, or None if the deployment failed
    """
    logger.info("Starting collection deployment...")
    logger.info("Deploying with account: %s", owner)

    http = client or httpx.AsyncClient(base_url=api_url, timeout=30.0)
    try:
        gallery = GalleryClient(http, Signer(owner), api_url=api_url)
        result = await gallery.deploy_collection(name, image)
        if result is None:
            logger.error("Deployment failed: %s", gallery.status.message)
            return None

        logger.info("Collection %s (%s) deployed to %s", name, result.symbol, result.address)
        logger.info("Transaction hash: %s", result.tx_hash)
        logger.info("Base URI: %s", result.base_uri)
        if image is not None and result.image_url is None:
            logger.warning(gallery.status.message)

        if mint:
            token_id = await gallery.mint(result.address)
            if token_id is None:
                logger.warning("Minting skipped: %s", gallery.status.message)
            else:
                logger.info("Token %d minted to %s", token_id, owner)
                logger.info("Metadata URL: %s%d", result.base_uri, token_id)

        logger.info("Deployment completed successfully")
        return result
    finally:
        if client is None:
            await http.aclose()


def main() -> None:
    """CLI entry point for collection deployment."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Deploy an NFT collection")
    parser.add_argument(
        "--name",
        default="Nexus Test Collection",
        help="Collection name",
    )
    parser.add_argument(
        "--owner",
        required=True,
        help="Owner address (0x...)",
    )
    parser.add_argument(
        "--image",
        type=Path,
        help="Path to the collection image",
    )
    parser.add_argument(
        "--mint",
        action="store_true",
        help="Mint the first token to the owner",
    )
    parser.add_argument(
        "--url",
        default=settings.api_url,
        help="Service base URL",
    )

    args = parser.parse_args()

    image = None
    if args.image:
        if not args.image.exists():
            logger.error("Image file not found: %s", args.image)
            sys.exit(1)
        image = load_image(args.image)

    result = asyncio.run(run_deploy(args.name, args.owner, args.url, image, args.mint))
    if result is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
