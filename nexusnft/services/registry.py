"""
Token registry service.

Implements the collection ledger: deployment, sequential minting,
transfers and approvals, and the owner-only metadata controls (base URI
and the one-way freeze latch).

Every mutating method runs against the caller's database session and
only flushes. The session's owner commits on success and rolls back on
any exception, so a rejected operation never leaves partial state and
never produces a transaction record.

The collection row is locked for the duration of a mutation, which
totally orders all mutations on one collection.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from nexusnft.config import MAX_TOKEN_ID, ZERO_ADDRESS
from nexusnft.db.operations import (
    collection_to_model,
    count_tokens_owned,
    create_collection,
    create_token,
    get_collection,
    get_events,
    get_operator_approval,
    get_token,
    record_transaction,
    token_to_model,
    transaction_to_receipt,
    upsert_operator_approval,
)
from nexusnft.models.collection import Collection, Token
from nexusnft.models.db import CollectionDB, TokenDB
from nexusnft.models.event import Receipt, RegistryEvent
from nexusnft.models.failure import (
    CollectionNotFoundError,
    InvalidInputError,
    MetadataFrozenError,
    TokenNotFoundError,
    UnauthorizedError,
)
from nexusnft.services.addresses import (
    derive_contract_address,
    is_zero_address,
    new_transaction_hash,
    normalize_address,
    same_address,
)

logger = logging.getLogger(__name__)

# Event names, matching the ERC-721 / ERC-4906 / Ownable notifications
TRANSFER = "Transfer"
APPROVAL = "Approval"
APPROVAL_FOR_ALL = "ApprovalForAll"
METADATA_UPDATE = "MetadataUpdate"
BATCH_METADATA_UPDATE = "BatchMetadataUpdate"
OWNERSHIP_TRANSFERRED = "OwnershipTransferred"


class TokenRegistry:
    """
    Ledger of deployed collections and their tokens.

    Usage:
        registry = TokenRegistry(session)
        collection, receipt = await registry.deploy("My NFT", "MNFT", owner)
        token_id, receipt = await registry.mint(collection.address, caller)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Mutations ---

    async def deploy(self, name: str, symbol: str, owner: str) -> tuple[Collection, Receipt]:
        """
        Deploy a new collection.

        The collection starts with next_token_id=1, an empty base URI and
        the freeze latch open. Name and symbol are not required to be
        non-empty.

        Raises:
            InvalidInputError: If owner is not a valid, non-zero address
        """
        owner = normalize_address(owner, "owner")
        if is_zero_address(owner):
            raise InvalidInputError("Owner cannot be the zero address", detail="owner")

        address = derive_contract_address(owner, name, symbol)
        row = await create_collection(self.session, address, name, symbol, owner)

        receipt = await self._record(
            row,
            "deploy",
            owner,
            [
                RegistryEvent(
                    OWNERSHIP_TRANSFERRED, {"previousOwner": ZERO_ADDRESS, "newOwner": owner}
                )
            ],
        )
        logger.info("Deployed collection %s (%s) owned by %s", address, symbol, owner)
        return collection_to_model(row), receipt

    async def mint(self, address: str, caller: str) -> tuple[int, Receipt]:
        """
        Mint the next token to the caller.

        Anyone may mint. Token IDs are assigned sequentially from 1.

        Returns:
            Tuple of (token_id, receipt)
        """
        caller = normalize_address(caller, "caller")
        row = await self._load(address, for_update=True)

        token_id = row.next_token_id
        await create_token(self.session, row.id, token_id, caller)
        row.next_token_id = token_id + 1

        receipt = await self._record(
            row,
            "mint",
            caller,
            [
                RegistryEvent(TRANSFER, {"from": ZERO_ADDRESS, "to": caller, "tokenId": token_id}),
                RegistryEvent(METADATA_UPDATE, {"tokenId": token_id}),
            ],
        )
        logger.info("Minted token %d of %s to %s", token_id, row.address, caller)
        return token_id, receipt

    async def set_base_uri(self, address: str, caller: str, uri: str) -> Receipt:
        """
        Replace the base URI.

        A frozen collection refuses every caller, so the freeze check runs
        before the owner check.

        Raises:
            MetadataFrozenError: If metadata has been frozen
            UnauthorizedError: If caller is not the collection owner
        """
        caller = normalize_address(caller, "caller")
        row = await self._load(address, for_update=True)

        if row.frozen:
            raise MetadataFrozenError(row.address)
        self._require_owner(row, caller)

        row.base_uri = uri
        receipt = await self._record(
            row,
            "setBaseURI",
            caller,
            [RegistryEvent(BATCH_METADATA_UPDATE, {"fromTokenId": 1, "toTokenId": MAX_TOKEN_ID})],
        )
        logger.info("Base URI of %s set to %s", row.address, uri)
        return receipt

    async def freeze(self, address: str, caller: str) -> Receipt:
        """
        Close the metadata latch permanently.

        Freezing an already frozen collection is a no-op, not an error.

        Raises:
            UnauthorizedError: If caller is not the collection owner
        """
        caller = normalize_address(caller, "caller")
        row = await self._load(address, for_update=True)
        self._require_owner(row, caller)

        if row.frozen:
            logger.info("Metadata of %s already frozen", row.address)
        row.frozen = True

        return await self._record(row, "freezeMetadata", caller, [])

    async def transfer_from(
        self, address: str, caller: str, from_address: str, to_address: str, token_id: int
    ) -> Receipt:
        """
        Move a token between holders.

        The caller must be the holder, the token's approved address, or an
        operator approved by the holder. A transfer clears the token's
        single-token approval.

        Raises:
            InvalidInputError: If `to` is the zero address or `from` is not the holder
            TokenNotFoundError: If the token was never minted
            UnauthorizedError: If caller is neither holder nor approved
        """
        caller = normalize_address(caller, "caller")
        from_address = normalize_address(from_address, "from")
        to_address = normalize_address(to_address, "to")
        if is_zero_address(to_address):
            raise InvalidInputError("Cannot transfer to the zero address", detail="to")

        row = await self._load(address, for_update=True)
        token = await self._require_token(row, token_id)

        if not await self._is_authorized(row, token, caller):
            raise UnauthorizedError(caller)
        if token.owner != from_address:
            raise InvalidInputError(
                f"{from_address} does not own token {token_id}",
                detail="from",
            )

        token.owner = to_address
        token.approved = None

        receipt = await self._record(
            row,
            "transferFrom",
            caller,
            [
                RegistryEvent(
                    TRANSFER, {"from": from_address, "to": to_address, "tokenId": token_id}
                )
            ],
        )
        logger.info("Transferred token %d of %s to %s", token_id, row.address, to_address)
        return receipt

    async def approve(self, address: str, caller: str, to_address: str, token_id: int) -> Receipt:
        """
        Approve an address to transfer one token.

        Approving the zero address clears the approval.

        Raises:
            TokenNotFoundError: If the token was never minted
            UnauthorizedError: If caller is neither holder nor operator for the holder
        """
        caller = normalize_address(caller, "caller")
        to_address = normalize_address(to_address, "to")
        row = await self._load(address, for_update=True)
        token = await self._require_token(row, token_id)

        if caller != token.owner and not await self._is_operator(row, token.owner, caller):
            raise UnauthorizedError(caller)

        token.approved = None if is_zero_address(to_address) else to_address
        return await self._record(
            row,
            "approve",
            caller,
            [
                RegistryEvent(
                    APPROVAL, {"owner": token.owner, "approved": to_address, "tokenId": token_id}
                )
            ],
        )

    async def set_approval_for_all(
        self, address: str, caller: str, operator: str, approved: bool
    ) -> Receipt:
        """
        Grant or revoke an operator over all of the caller's tokens.

        Raises:
            InvalidInputError: If operator is the zero address
        """
        caller = normalize_address(caller, "caller")
        operator = normalize_address(operator, "operator")
        if is_zero_address(operator):
            raise InvalidInputError("Operator cannot be the zero address", detail="operator")

        row = await self._load(address, for_update=True)
        await upsert_operator_approval(self.session, row.id, caller, operator, approved)
        return await self._record(
            row,
            "setApprovalForAll",
            caller,
            [
                RegistryEvent(
                    APPROVAL_FOR_ALL,
                    {"owner": caller, "operator": operator, "approved": approved},
                )
            ],
        )

    # --- Views ---

    async def get_collection(self, address: str) -> Collection:
        """Get the current state of a collection."""
        return collection_to_model(await self._load(address))

    async def token_uri(self, address: str, token_id: int) -> str:
        """
        Get the metadata URI of a token.

        Raises:
            TokenNotFoundError: If the token was never minted
        """
        collection = collection_to_model(await self._load(address))
        if not collection.exists(token_id):
            raise TokenNotFoundError(token_id)
        return collection.token_uri(token_id)

    async def total_supply(self, address: str) -> int:
        """Number of tokens minted in a collection."""
        return collection_to_model(await self._load(address)).total_supply()

    async def is_metadata_frozen(self, address: str) -> bool:
        """Whether the base URI can no longer change."""
        return (await self._load(address)).frozen

    async def owner_of(self, address: str, token_id: int) -> str:
        """
        Get the holder of a token.

        Raises:
            TokenNotFoundError: If the token was never minted
        """
        row = await self._load(address)
        return (await self._require_token(row, token_id)).owner

    async def get_approved(self, address: str, token_id: int) -> str | None:
        """
        Get the address approved to transfer a token, if any.

        Raises:
            TokenNotFoundError: If the token was never minted
        """
        row = await self._load(address)
        return (await self._require_token(row, token_id)).approved

    async def get_token(self, address: str, token_id: int) -> Token:
        """Get a minted token."""
        row = await self._load(address)
        return token_to_model(await self._require_token(row, token_id))

    async def balance_of(self, address: str, holder: str) -> int:
        """Number of tokens held by an address."""
        holder = normalize_address(holder, "owner")
        row = await self._load(address)
        return await count_tokens_owned(self.session, row.id, holder)

    async def is_approved_for_all(self, address: str, holder: str, operator: str) -> bool:
        """Whether an operator may move all of a holder's tokens."""
        row = await self._load(address)
        return await self._is_operator(
            row, normalize_address(holder, "owner"), normalize_address(operator, "operator")
        )

    async def events(
        self, address: str, name: str | None = None, limit: int = 100
    ) -> list[tuple[RegistryEvent, str, int]]:
        """
        Get emitted events for a collection in emission order.

        Returns:
            List of (event, tx_hash, block_number) tuples
        """
        row = await self._load(address)
        rows = await get_events(self.session, row.address, name=name, limit=limit)
        return [
            (
                RegistryEvent(name=e.name, args=dict(e.args), log_index=e.log_index),
                tx.tx_hash,
                tx.id,
            )
            for e, tx in rows
        ]

    # --- Internals ---

    async def _load(self, address: str, *, for_update: bool = False) -> CollectionDB:
        address = normalize_address(address, "contract address")
        row = await get_collection(self.session, address, for_update=for_update)
        if row is None:
            raise CollectionNotFoundError(address)
        return row

    async def _require_token(self, row: CollectionDB, token_id: int) -> TokenDB:
        if not 1 <= token_id < row.next_token_id:
            raise TokenNotFoundError(token_id)
        token = await get_token(self.session, row.id, token_id)
        if token is None:
            raise TokenNotFoundError(token_id)
        return token

    @staticmethod
    def _require_owner(row: CollectionDB, caller: str) -> None:
        if not same_address(row.owner, caller):
            raise UnauthorizedError(caller)

    async def _is_operator(self, row: CollectionDB, holder: str, operator: str) -> bool:
        record = await get_operator_approval(self.session, row.id, holder, operator)
        return record is not None and record.approved

    async def _is_authorized(self, row: CollectionDB, token: TokenDB, caller: str) -> bool:
        if caller == token.owner or caller == token.approved:
            return True
        return await self._is_operator(row, token.owner, caller)

    async def _record(
        self, row: CollectionDB, method: str, sender: str, events: list[RegistryEvent]
    ) -> Receipt:
        transaction = await record_transaction(
            self.session,
            tx_hash=new_transaction_hash(),
            contract_address=row.address,
            method=method,
            sender=sender,
            events=events,
        )
        return transaction_to_receipt(transaction)
