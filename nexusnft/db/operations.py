"""
Database CRUD operations for the registry ledger.

Provides async functions for reading and writing collections, tokens,
approvals and committed transactions. Business rules live in
nexusnft.services.registry; these functions only move rows.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from nexusnft.models.collection import Collection, Token
from nexusnft.models.db import (
    CollectionDB,
    EventDB,
    OperatorApprovalDB,
    TokenDB,
    TransactionDB,
)
from nexusnft.models.event import Receipt, RegistryEvent

# --- Collection Operations ---


async def get_collection(
    session: AsyncSession, address: str, *, for_update: bool = False
) -> CollectionDB | None:
    """
    Get a collection by its (lower-cased) address.

    With for_update=True the row is locked until the transaction ends,
    which serializes mutations on the same collection.
    """
    query = select(CollectionDB).where(CollectionDB.address == address)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def create_collection(
    session: AsyncSession,
    address: str,
    name: str,
    symbol: str,
    owner: str,
) -> CollectionDB:
    """
    Create a new collection row.

    Raises IntegrityError if the address is already taken.
    """
    collection = CollectionDB(
        address=address,
        name=name,
        symbol=symbol,
        owner=owner,
        next_token_id=1,
        base_uri="",
        frozen=False,
    )
    session.add(collection)
    await session.flush()
    return collection


def collection_to_model(collection: CollectionDB) -> Collection:
    """Convert a database collection to a domain model."""
    return Collection(
        address=collection.address,
        name=collection.name,
        symbol=collection.symbol,
        owner=collection.owner,
        next_token_id=collection.next_token_id,
        base_uri=collection.base_uri,
        frozen=collection.frozen,
    )


# --- Token Operations ---


async def get_token(session: AsyncSession, collection_id: int, token_id: int) -> TokenDB | None:
    """Get a minted token, or None if the ID was never minted."""
    result = await session.execute(
        select(TokenDB).where(
            TokenDB.collection_id == collection_id,
            TokenDB.token_id == token_id,
        )
    )
    return result.scalar_one_or_none()


async def create_token(
    session: AsyncSession, collection_id: int, token_id: int, owner: str
) -> TokenDB:
    """
    Insert a freshly minted token.

    The (collection, token_id) unique constraint guarantees an ID is
    never assigned twice.
    """
    token = TokenDB(collection_id=collection_id, token_id=token_id, owner=owner)
    session.add(token)
    await session.flush()
    return token


async def count_tokens_owned(session: AsyncSession, collection_id: int, owner: str) -> int:
    """Count tokens held by an address within one collection."""
    result = await session.execute(
        select(func.count(TokenDB.id)).where(
            TokenDB.collection_id == collection_id,
            TokenDB.owner == owner,
        )
    )
    return int(result.scalar_one())


def token_to_model(token: TokenDB) -> Token:
    """Convert a database token to a domain model."""
    return Token(token_id=token.token_id, owner=token.owner, approved=token.approved)


# --- Approval Operations ---


async def get_operator_approval(
    session: AsyncSession, collection_id: int, owner: str, operator: str
) -> OperatorApprovalDB | None:
    """Get the operator approval record for an (owner, operator) pair."""
    result = await session.execute(
        select(OperatorApprovalDB).where(
            OperatorApprovalDB.collection_id == collection_id,
            OperatorApprovalDB.owner == owner,
            OperatorApprovalDB.operator == operator,
        )
    )
    return result.scalar_one_or_none()


async def upsert_operator_approval(
    session: AsyncSession,
    collection_id: int,
    owner: str,
    operator: str,
    approved: bool,
) -> OperatorApprovalDB:
    """
    Insert or update an operator approval.

    If a record for the pair exists, updates it.
    Otherwise creates a new record.
    """
    existing = await get_operator_approval(session, collection_id, owner, operator)

    if existing:
        existing.approved = approved
        await session.flush()
        return existing

    record = OperatorApprovalDB(
        collection_id=collection_id,
        owner=owner,
        operator=operator,
        approved=approved,
    )
    session.add(record)
    await session.flush()
    return record


# --- Transaction Operations ---


async def record_transaction(
    session: AsyncSession,
    tx_hash: str,
    contract_address: str,
    method: str,
    sender: str,
    events: list[RegistryEvent],
) -> TransactionDB:
    """
    Persist a committed mutation together with its event logs.

    Log indexes follow the order in which the events were emitted.
    """
    transaction = TransactionDB(
        tx_hash=tx_hash,
        contract_address=contract_address,
        method=method,
        sender=sender,
        status=1,
        events=[
            EventDB(
                contract_address=contract_address,
                log_index=index,
                name=event.name,
                args=_encode_args(event.args),
            )
            for index, event in enumerate(events)
        ],
    )
    session.add(transaction)
    await session.flush()
    return transaction


async def get_transaction(session: AsyncSession, tx_hash: str) -> TransactionDB | None:
    """Get a committed transaction by hash, with its events loaded."""
    result = await session.execute(
        select(TransactionDB)
        .where(TransactionDB.tx_hash == tx_hash)
        .options(selectinload(TransactionDB.events))
    )
    return result.scalar_one_or_none()


async def get_events(
    session: AsyncSession,
    contract_address: str,
    name: str | None = None,
    limit: int = 100,
) -> list[tuple[EventDB, TransactionDB]]:
    """Get events for a collection in emission order, optionally filtered by name."""
    query = (
        select(EventDB, TransactionDB)
        .join(TransactionDB, EventDB.transaction_id == TransactionDB.id)
        .where(EventDB.contract_address == contract_address)
        .order_by(TransactionDB.id, EventDB.log_index)
        .limit(limit)
    )
    if name:
        query = query.where(EventDB.name == name)
    result = await session.execute(query)
    return [(row[0], row[1]) for row in result.all()]


def transaction_to_receipt(transaction: TransactionDB) -> Receipt:
    """Convert a database transaction to a receipt."""
    return Receipt(
        tx_hash=transaction.tx_hash,
        block_number=transaction.id,
        contract_address=transaction.contract_address,
        method=transaction.method,
        sender=transaction.sender,
        status=transaction.status,
        events=[
            RegistryEvent(name=e.name, args=dict(e.args), log_index=e.log_index)
            for e in transaction.events
        ],
    )


def _encode_args(args: dict[str, Any]) -> dict[str, Any]:
    """Store integers as decimal strings so 256-bit values survive JSON columns."""
    return {
        key: str(value) if isinstance(value, int) and not isinstance(value, bool) else value
        for key, value in args.items()
    }
