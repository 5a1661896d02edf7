"""
Gallery client.

Drives the end-to-end user flows against a running service: deploy a
collection and point it at the metadata resolver, mint, transfer, and
load the gallery of a collection.

The client allows one outstanding action at a time and never retries.
The outcome of each action is reported through `status`.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from nexusnft.client.errors import TransactionFailedError, UserCancelledError
from nexusnft.client.signer import Signer
from nexusnft.client.status import StatusMessage
from nexusnft.client.symbols import generate_symbol
from nexusnft.config import ZERO_ADDRESS, settings
from nexusnft.models.event import Receipt, RegistryEvent
from nexusnft.models.failure import FailureKind
from nexusnft.services.metadata_resolver import metadata_base_uri

logger = logging.getLogger(__name__)

UPLOAD_WARNING = "Warning: Failed to upload collection image, but contract was deployed"


@dataclass
class ImageUpload:
    """An image file chosen for a collection."""

    filename: str
    data: bytes
    content_type: str


@dataclass
class DeployResult:
    """Outcome of a successful deployment."""

    address: str
    symbol: str
    tx_hash: str
    base_uri: str
    image_url: str | None = None


@dataclass
class GalleryItem:
    """One token in a collection gallery. metadata is None if it could not be loaded."""

    token_id: str
    metadata: dict[str, Any] | None = None


def parse_receipt(data: dict[str, Any]) -> Receipt:
    """Build a receipt from its JSON representation."""
    return Receipt(
        tx_hash=data["tx_hash"],
        block_number=data["block_number"],
        contract_address=data["contract_address"],
        method=data["method"],
        sender=data["sender"],
        status=data.get("status", 1),
        events=[
            RegistryEvent(name=e["name"], args=e.get("args", {}), log_index=e.get("log_index", 0))
            for e in data.get("events", [])
        ],
    )


class GalleryClient:
    """
    Client for the collection service.

    Usage:
        async with httpx.AsyncClient(base_url=api_url) as http:
            client = GalleryClient(http, Signer(address))
            result = await client.deploy_collection("My NFT")
            token_id = await client.mint(result.address)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        signer: Signer,
        *,
        api_url: str | None = None,
        poll_interval: float | None = None,
        receipt_timeout: float | None = None,
    ):
        self.http = http
        self.signer = signer
        self.api_url = api_url or settings.api_url
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.receipt_poll_interval
        )
        self.receipt_timeout = (
            receipt_timeout if receipt_timeout is not None else settings.receipt_timeout
        )
        self.status = StatusMessage()
        self.busy = False

    # --- Flows ---

    async def deploy_collection(
        self, name: str, image: ImageUpload | None = None
    ) -> DeployResult | None:
        """
        Deploy a collection, point it at the metadata resolver and upload its image.

        A failed image upload leaves the deployment in place and ends
        with a warning status.

        Returns:
            DeployResult, or None if the deployment did not complete
        """
        if not self._begin():
            return None

        try:
            self._set_status(StatusMessage.info("Preparing deployment..."))
            symbol = generate_symbol(name)

            await self.signer.authorize("deploy", {"name": name, "symbol": symbol})
            deployed = await self._send(
                "POST",
                "/collections",
                json={"name": name, "symbol": symbol, "owner": self.signer.address},
            )
            tx_hash = deployed["receipt"]["tx_hash"]
            self._set_status(StatusMessage.info(f"Deploying... Transaction: {tx_hash}", tx_hash))
            receipt = await self.wait_for_receipt(tx_hash)
            address = receipt.contract_address

            base_uri = metadata_base_uri(self.api_url, address)
            await self.signer.authorize("setBaseURI", {"contract": address, "uri": base_uri})
            submitted = await self._send(
                "PUT", f"/collections/{address}/base-uri", json={"uri": base_uri}
            )
            await self.wait_for_receipt(submitted["tx_hash"])

            result = DeployResult(
                address=address, symbol=symbol, tx_hash=tx_hash, base_uri=base_uri
            )

            if image is not None:
                self._set_status(StatusMessage.info("Uploading collection image..."))
                result.image_url = await self._upload_image(address, image)
                if result.image_url is None:
                    self._set_status(StatusMessage.info(UPLOAD_WARNING, tx_hash))
                    return result

            self._set_status(
                StatusMessage.success(
                    f"NFT Collection deployed successfully at {address}. "
                    f"View on Explorer: {settings.explorer_url}/address/{address}",
                    tx_hash,
                )
            )
            return result

        except UserCancelledError:
            self._set_status(StatusMessage.info("Deployment cancelled"))
        except (TransactionFailedError, httpx.HTTPError, TimeoutError) as e:
            logger.error("Deployment error: %s", e)
            message = str(e) or "Unknown error"
            self._set_status(StatusMessage.error(f"Deployment failed: {message}"))
        finally:
            self.busy = False
        return None

    async def mint(self, address: str) -> int | None:
        """
        Mint the next token of a collection to the signer.

        Returns:
            The new token ID, or None if the mint did not happen
        """
        if not self._begin():
            return None

        try:
            self._set_status(StatusMessage.info("Initiating NFT mint..."))
            await self.signer.authorize("mint", {"contract": address})
            submitted = await self._send("POST", f"/collections/{address}/mint")
            tx_hash = submitted["receipt"]["tx_hash"]
            self._set_status(
                StatusMessage.info("Minting NFT... Monitoring transaction status...", tx_hash)
            )

            receipt = await self.wait_for_receipt(tx_hash)
            if receipt.status != 1:
                self._set_status(StatusMessage.error("Minting failed. Please try again."))
                return None

            token_id = _minted_token_id(receipt)
            label = str(token_id) if token_id is not None else "unknown"
            self._set_status(StatusMessage.success(f"NFT #{label} minted successfully", tx_hash))
            return token_id

        except UserCancelledError:
            self._set_status(StatusMessage.info("Transaction cancelled"))
        except (TransactionFailedError, httpx.HTTPError, TimeoutError) as e:
            logger.error("Minting error: %s", e)
            self._set_status(StatusMessage.error("Failed to mint NFT. Please try again."))
        finally:
            self.busy = False
        return None

    async def transfer(self, address: str, token_id: int, to: str) -> Receipt | None:
        """
        Transfer one of the signer's tokens.

        Does nothing when no recipient is given.

        Returns:
            The transfer receipt, or None if the transfer did not happen
        """
        if not to or not self._begin():
            return None

        try:
            await self.signer.authorize(
                "transferFrom", {"contract": address, "to": to, "tokenId": token_id}
            )
            submitted = await self._send(
                "POST",
                f"/collections/{address}/transfer",
                json={"from": self.signer.address, "to": to, "token_id": token_id},
            )
            tx_hash = submitted["tx_hash"]
            self._set_status(StatusMessage.info("Transferring NFT...", tx_hash))

            receipt = await self.wait_for_receipt(tx_hash)
            self._set_status(StatusMessage.success("NFT transferred successfully", tx_hash))
            return receipt

        except UserCancelledError:
            self._set_status(StatusMessage.info("Transfer cancelled"))
        except (TransactionFailedError, httpx.HTTPError, TimeoutError) as e:
            logger.error("Transfer error: %s", e)
            self._set_status(StatusMessage.error("Failed to transfer NFT. Please try again."))
        finally:
            self.busy = False
        return None

    async def fetch_gallery(self, address: str) -> list[GalleryItem]:
        """
        Load every token of a collection with its metadata.

        Tokens whose URI or metadata cannot be fetched are still listed,
        with metadata set to None.
        """
        supply = await self._send("GET", f"/collections/{address}/total-supply")

        items: list[GalleryItem] = []
        for token_id in range(1, supply["total_supply"] + 1):
            items.append(GalleryItem(str(token_id), await self._fetch_metadata(address, token_id)))
        return items

    async def wait_for_receipt(self, tx_hash: str) -> Receipt:
        """
        Poll until the transaction has a receipt.

        Raises:
            TimeoutError: If no receipt appears within the configured timeout
        """
        deadline = time.monotonic() + self.receipt_timeout
        while True:
            response = await self.http.get(f"/transactions/{tx_hash}")
            if response.status_code == 200:
                return parse_receipt(response.json())
            if response.status_code != 404:
                raise _failure_from_response(response)
            if time.monotonic() >= deadline:
                raise TimeoutError(f"No receipt for {tx_hash} after {self.receipt_timeout}s")
            await asyncio.sleep(self.poll_interval)

    # --- Internals ---

    def _begin(self) -> bool:
        if self.busy:
            self._set_status(StatusMessage.error("Another action is already in progress"))
            return False
        self.busy = True
        return True

    def _set_status(self, status: StatusMessage) -> None:
        self.status = status
        logger.debug("Status %s: %s", status.kind, status.message)

    async def _send(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        response = await self.http.request(
            method,
            path,
            json=json,
            headers={"X-Caller-Address": self.signer.address},
        )
        if response.is_error:
            raise _failure_from_response(response)
        return response.json()

    async def _upload_image(self, address: str, image: ImageUpload) -> str | None:
        try:
            response = await self.http.post(
                "/upload",
                data={"contractAddress": address},
                files={"file": (image.filename, image.data, image.content_type)},
            )
            if response.is_error:
                raise _failure_from_response(response)
            return response.json()["url"]
        except (TransactionFailedError, httpx.HTTPError) as e:
            logger.error("Image upload error: %s", e)
            return None

    async def _fetch_metadata(self, address: str, token_id: int) -> dict[str, Any] | None:
        try:
            uri = await self._send("GET", f"/collections/{address}/tokens/{token_id}/uri")
            response = await self.http.get(uri["token_uri"])
            if not response.is_success:
                return None
            return response.json()
        except (TransactionFailedError, httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching NFT %d: %s", token_id, e)
            return None


def _minted_token_id(receipt: Receipt) -> int | None:
    """Token ID from the mint's Transfer event, if present."""
    for event in receipt.events:
        if event.name == "Transfer" and event.args.get("from") == ZERO_ADDRESS:
            return int(event.args["tokenId"])
    return None


def _failure_from_response(response: httpx.Response) -> TransactionFailedError:
    """Turn an error response into an exception, keeping the envelope's kind and message."""
    try:
        body = response.json()
    except ValueError:
        body = {}

    failure = body.get("failure") if isinstance(body, dict) else None
    if isinstance(failure, dict):
        return TransactionFailedError(
            failure.get("message") or response.reason_phrase,
            kind=_failure_kind(failure.get("kind")),
            status_code=response.status_code,
        )

    detail = body.get("detail") if isinstance(body, dict) else None
    return TransactionFailedError(
        str(detail or f"HTTP {response.status_code}"),
        status_code=response.status_code,
    )


def _failure_kind(value: Any) -> FailureKind | None:
    try:
        return FailureKind(value)
    except ValueError:
        return None
