"""Tests for the token registry service."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nexusnft.config import MAX_TOKEN_ID, ZERO_ADDRESS
from nexusnft.models.db import TransactionDB
from nexusnft.models.failure import (
    CollectionNotFoundError,
    InvalidInputError,
    MetadataFrozenError,
    TokenNotFoundError,
    UnauthorizedError,
)
from nexusnft.services.registry import TokenRegistry

OWNER = "0x" + "a1" * 20
ALICE = "0x" + "b2" * 20
BOB = "0x" + "c3" * 20
UNKNOWN_COLLECTION = "0x" + "de" * 20


@pytest.fixture
def registry(session: AsyncSession) -> TokenRegistry:
    return TokenRegistry(session)


@pytest.fixture
async def collection_address(registry: TokenRegistry) -> str:
    collection, _ = await registry.deploy("Nexus Test Collection", "NNFT", OWNER)
    return collection.address


async def _transaction_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(TransactionDB.id)))
    return int(result.scalar_one())


class TestDeploy:
    async def test_initial_state(self, registry: TokenRegistry) -> None:
        """A new collection is empty, unfrozen and has no base URI."""
        collection, receipt = await registry.deploy("My NFT", "MNFT", OWNER)

        assert collection.name == "My NFT"
        assert collection.symbol == "MNFT"
        assert collection.owner == OWNER
        assert collection.total_supply() == 0
        assert collection.base_uri == ""
        assert collection.frozen is False
        assert collection.address.startswith("0x")
        assert len(collection.address) == 42
        assert receipt.contract_address == collection.address
        assert receipt.status == 1

    async def test_emits_ownership_transferred(self, registry: TokenRegistry) -> None:
        _, receipt = await registry.deploy("My NFT", "MNFT", OWNER)

        event = receipt.find_event("OwnershipTransferred")
        assert event is not None
        assert event.args == {"previousOwner": ZERO_ADDRESS, "newOwner": OWNER}

    async def test_owner_is_normalized(self, registry: TokenRegistry) -> None:
        collection, _ = await registry.deploy("My NFT", "MNFT", OWNER.upper().replace("0X", "0x"))

        assert collection.owner == OWNER

    async def test_empty_name_and_symbol_allowed(self, registry: TokenRegistry) -> None:
        collection, _ = await registry.deploy("", "", OWNER)

        assert collection.name == ""
        assert collection.symbol == ""

    async def test_each_deployment_gets_its_own_address(self, registry: TokenRegistry) -> None:
        first, _ = await registry.deploy("Same", "SAME", OWNER)
        second, _ = await registry.deploy("Same", "SAME", OWNER)

        assert first.address != second.address

    async def test_rejects_zero_owner(self, registry: TokenRegistry) -> None:
        with pytest.raises(InvalidInputError):
            await registry.deploy("My NFT", "MNFT", ZERO_ADDRESS)

    async def test_rejects_malformed_owner(self, registry: TokenRegistry) -> None:
        with pytest.raises(InvalidInputError):
            await registry.deploy("My NFT", "MNFT", "not-an-address")


class TestMint:
    async def test_ids_are_sequential_from_one(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        ids = [(await registry.mint(collection_address, ALICE))[0] for _ in range(3)]

        assert ids == [1, 2, 3]
        assert await registry.total_supply(collection_address) == 3

    async def test_minted_to_caller(self, registry: TokenRegistry, collection_address: str) -> None:
        token_id, _ = await registry.mint(collection_address, ALICE)

        assert await registry.owner_of(collection_address, token_id) == ALICE
        assert await registry.balance_of(collection_address, ALICE) == 1

    async def test_anyone_can_mint(self, registry: TokenRegistry, collection_address: str) -> None:
        await registry.mint(collection_address, ALICE)
        await registry.mint(collection_address, BOB)

        assert await registry.owner_of(collection_address, 1) == ALICE
        assert await registry.owner_of(collection_address, 2) == BOB

    async def test_emits_transfer_and_metadata_update(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        _, receipt = await registry.mint(collection_address, ALICE)

        assert [e.name for e in receipt.events] == ["Transfer", "MetadataUpdate"]
        transfer = receipt.find_event("Transfer")
        assert transfer is not None
        assert transfer.args == {"from": ZERO_ADDRESS, "to": ALICE, "tokenId": "1"}

    async def test_unknown_collection(self, registry: TokenRegistry) -> None:
        with pytest.raises(CollectionNotFoundError):
            await registry.mint(UNKNOWN_COLLECTION, ALICE)


class TestTokenURI:
    async def test_empty_base_uri_yields_bare_id(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.mint(collection_address, ALICE)

        assert await registry.token_uri(collection_address, 1) == "1"

    async def test_concatenates_base_uri_and_id(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.mint(collection_address, ALICE)
        await registry.mint(collection_address, ALICE)
        base = f"https://api.example.com/metadata?contract={collection_address}&tokenId="
        await registry.set_base_uri(collection_address, OWNER, base)

        assert await registry.token_uri(collection_address, 2) == f"{base}2"

    @pytest.mark.parametrize("token_id", [0, 2, 99])
    async def test_unminted_token(
        self, registry: TokenRegistry, collection_address: str, token_id: int
    ) -> None:
        await registry.mint(collection_address, ALICE)

        with pytest.raises(TokenNotFoundError):
            await registry.token_uri(collection_address, token_id)


class TestSetBaseURI:
    async def test_owner_sets_base_uri(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        receipt = await registry.set_base_uri(collection_address, OWNER, "ipfs://base/")

        collection = await registry.get_collection(collection_address)
        assert collection.base_uri == "ipfs://base/"

        event = receipt.find_event("BatchMetadataUpdate")
        assert event is not None
        assert event.args == {"fromTokenId": "1", "toTokenId": str(MAX_TOKEN_ID)}

    async def test_non_owner_rejected(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        with pytest.raises(UnauthorizedError) as exc_info:
            await registry.set_base_uri(collection_address, ALICE, "ipfs://evil/")

        assert exc_info.value.account == ALICE
        assert (await registry.get_collection(collection_address)).base_uri == ""

    async def test_rejection_records_no_transaction(
        self, registry: TokenRegistry, collection_address: str, session: AsyncSession
    ) -> None:
        before = await _transaction_count(session)

        with pytest.raises(UnauthorizedError):
            await registry.set_base_uri(collection_address, ALICE, "ipfs://evil/")

        assert await _transaction_count(session) == before


class TestFreeze:
    async def test_owner_freezes(self, registry: TokenRegistry, collection_address: str) -> None:
        await registry.freeze(collection_address, OWNER)

        assert await registry.is_metadata_frozen(collection_address) is True

    async def test_non_owner_cannot_freeze(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            await registry.freeze(collection_address, ALICE)

        assert await registry.is_metadata_frozen(collection_address) is False

    async def test_freeze_is_idempotent(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.freeze(collection_address, OWNER)
        receipt = await registry.freeze(collection_address, OWNER)

        assert receipt.status == 1
        assert receipt.events == []
        assert await registry.is_metadata_frozen(collection_address) is True

    @pytest.mark.parametrize("caller", [OWNER, ALICE])
    async def test_base_uri_locked_after_freeze(
        self, registry: TokenRegistry, collection_address: str, caller: str
    ) -> None:
        """Once frozen, every caller is refused and the URI never changes."""
        await registry.set_base_uri(collection_address, OWNER, "ipfs://final/")
        await registry.freeze(collection_address, OWNER)

        with pytest.raises(MetadataFrozenError):
            await registry.set_base_uri(collection_address, caller, "ipfs://other/")

        collection = await registry.get_collection(collection_address)
        assert collection.base_uri == "ipfs://final/"
        assert collection.frozen is True

    async def test_minting_continues_after_freeze(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.set_base_uri(collection_address, OWNER, "ipfs://final/")
        await registry.freeze(collection_address, OWNER)

        token_id, _ = await registry.mint(collection_address, ALICE)

        assert await registry.token_uri(collection_address, token_id) == "ipfs://final/1"


class TestTransfer:
    @pytest.fixture
    async def minted(self, registry: TokenRegistry, collection_address: str) -> str:
        await registry.mint(collection_address, ALICE)
        return collection_address

    async def test_holder_transfers(self, registry: TokenRegistry, minted: str) -> None:
        receipt = await registry.transfer_from(minted, ALICE, ALICE, BOB, 1)

        assert await registry.owner_of(minted, 1) == BOB
        assert await registry.balance_of(minted, ALICE) == 0
        assert await registry.balance_of(minted, BOB) == 1
        transfer = receipt.find_event("Transfer")
        assert transfer is not None
        assert transfer.args == {"from": ALICE, "to": BOB, "tokenId": "1"}

    async def test_supply_and_uri_unchanged(self, registry: TokenRegistry, minted: str) -> None:
        uri_before = await registry.token_uri(minted, 1)

        await registry.transfer_from(minted, ALICE, ALICE, BOB, 1)

        assert await registry.total_supply(minted) == 1
        assert await registry.token_uri(minted, 1) == uri_before

    async def test_stranger_rejected(self, registry: TokenRegistry, minted: str) -> None:
        with pytest.raises(UnauthorizedError):
            await registry.transfer_from(minted, BOB, ALICE, BOB, 1)

        assert await registry.owner_of(minted, 1) == ALICE

    async def test_approved_address_transfers(
        self, registry: TokenRegistry, minted: str
    ) -> None:
        await registry.approve(minted, ALICE, BOB, 1)

        await registry.transfer_from(minted, BOB, ALICE, BOB, 1)

        token = await registry.get_token(minted, 1)
        assert token.owner == BOB
        assert token.approved is None

    async def test_operator_transfers(self, registry: TokenRegistry, minted: str) -> None:
        await registry.set_approval_for_all(minted, ALICE, BOB, True)

        await registry.transfer_from(minted, BOB, ALICE, OWNER, 1)

        assert await registry.owner_of(minted, 1) == OWNER

    async def test_revoked_operator_rejected(
        self, registry: TokenRegistry, minted: str
    ) -> None:
        await registry.set_approval_for_all(minted, ALICE, BOB, True)
        await registry.set_approval_for_all(minted, ALICE, BOB, False)

        assert await registry.is_approved_for_all(minted, ALICE, BOB) is False
        with pytest.raises(UnauthorizedError):
            await registry.transfer_from(minted, BOB, ALICE, BOB, 1)

    async def test_wrong_from_rejected(self, registry: TokenRegistry, minted: str) -> None:
        await registry.set_approval_for_all(minted, ALICE, BOB, True)

        with pytest.raises(InvalidInputError):
            await registry.transfer_from(minted, BOB, BOB, OWNER, 1)

    async def test_zero_recipient_rejected(self, registry: TokenRegistry, minted: str) -> None:
        with pytest.raises(InvalidInputError):
            await registry.transfer_from(minted, ALICE, ALICE, ZERO_ADDRESS, 1)

    async def test_unminted_token(self, registry: TokenRegistry, minted: str) -> None:
        with pytest.raises(TokenNotFoundError):
            await registry.transfer_from(minted, ALICE, ALICE, BOB, 2)

    @pytest.mark.parametrize("token_id", [0, 2**64, MAX_TOKEN_ID])
    async def test_out_of_range_token_not_found(
        self, registry: TokenRegistry, minted: str, token_id: int
    ) -> None:
        with pytest.raises(TokenNotFoundError):
            await registry.transfer_from(minted, ALICE, ALICE, BOB, token_id)
        with pytest.raises(TokenNotFoundError):
            await registry.owner_of(minted, token_id)
        with pytest.raises(TokenNotFoundError):
            await registry.get_approved(minted, token_id)
        with pytest.raises(TokenNotFoundError):
            await registry.approve(minted, ALICE, BOB, token_id)


class TestApprove:
    async def test_non_holder_cannot_approve(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.mint(collection_address, ALICE)

        with pytest.raises(UnauthorizedError):
            await registry.approve(collection_address, BOB, BOB, 1)

    async def test_zero_address_clears_approval(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.mint(collection_address, ALICE)
        await registry.approve(collection_address, ALICE, BOB, 1)

        assert await registry.get_approved(collection_address, 1) == BOB

        receipt = await registry.approve(collection_address, ALICE, ZERO_ADDRESS, 1)

        assert await registry.get_approved(collection_address, 1) is None
        assert receipt.events[0].name == "Approval"

    async def test_zero_operator_rejected(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        with pytest.raises(InvalidInputError):
            await registry.set_approval_for_all(collection_address, ALICE, ZERO_ADDRESS, True)


class TestEvents:
    async def test_events_in_emission_order(
        self, registry: TokenRegistry, collection_address: str
    ) -> None:
        await registry.mint(collection_address, ALICE)
        await registry.set_base_uri(collection_address, OWNER, "ipfs://base/")

        events = await registry.events(collection_address)

        assert [event.name for event, _, _ in events] == [
            "OwnershipTransferred",
            "Transfer",
            "MetadataUpdate",
            "BatchMetadataUpdate",
        ]
        blocks = [block for _, _, block in events]
        assert blocks == sorted(blocks)

    async def test_filter_by_name(self, registry: TokenRegistry, collection_address: str) -> None:
        await registry.mint(collection_address, ALICE)
        await registry.mint(collection_address, BOB)

        events = await registry.events(collection_address, name="Transfer")

        assert [event.args["to"] for event, _, _ in events] == [ALICE, BOB]

    async def test_events_scoped_to_collection(self, registry: TokenRegistry) -> None:
        first, _ = await registry.deploy("First", "FRST", OWNER)
        second, _ = await registry.deploy("Second", "SCND", OWNER)
        await registry.mint(second.address, ALICE)

        assert [e.name for e, _, _ in await registry.events(first.address)] == [
            "OwnershipTransferred"
        ]


class TestScenarios:
    async def test_deploy_configure_mint_freeze(self, registry: TokenRegistry) -> None:
        """Full lifecycle: deploy, point at the resolver, mint, freeze."""
        collection, _ = await registry.deploy("Nexus Test Collection", "NTC", OWNER)
        address = collection.address
        base = f"http://localhost:3000/metadata?contract={address}&tokenId="

        await registry.set_base_uri(address, OWNER, base)
        token_id, _ = await registry.mint(address, ALICE)
        await registry.freeze(address, OWNER)

        assert token_id == 1
        assert await registry.token_uri(address, 1) == f"{base}1"
        with pytest.raises(MetadataFrozenError):
            await registry.set_base_uri(address, OWNER, "http://elsewhere/")
        assert await registry.token_uri(address, 1) == f"{base}1"
