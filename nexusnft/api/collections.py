"""
Collection registry endpoints.

Exposes the token registry as a small RPC surface. The acting account is
taken from the X-Caller-Address header; every mutation returns the
receipt of the committed transaction.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from nexusnft.db.database import get_session
from nexusnft.models.collection import Collection
from nexusnft.models.event import Receipt, RegistryEvent
from nexusnft.models.failure import MissingParameterError
from nexusnft.services.registry import TokenRegistry

router = APIRouter(prefix="/collections", tags=["collections"])


def get_registry(session: Annotated[AsyncSession, Depends(get_session)]) -> TokenRegistry:
    """Dependency that binds a registry to the request's session."""
    return TokenRegistry(session)


def get_caller(x_caller_address: Annotated[str | None, Header()] = None) -> str:
    """Dependency that extracts the acting account from the request headers."""
    if not x_caller_address:
        raise MissingParameterError("X-Caller-Address", "Caller address is required")
    return x_caller_address


Registry = Annotated[TokenRegistry, Depends(get_registry)]
Caller = Annotated[str, Depends(get_caller)]


class EventResponse(BaseModel):
    """A notification emitted by a transaction."""

    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    log_index: int = 0


class ReceiptResponse(BaseModel):
    """Receipt of a committed transaction."""

    tx_hash: str
    block_number: int
    contract_address: str
    method: str
    sender: str
    status: int = 1
    events: list[EventResponse] = Field(default_factory=list)


class CollectionResponse(BaseModel):
    """Current state of a collection."""

    address: str
    name: str
    symbol: str
    owner: str
    total_supply: int = 0
    base_uri: str = ""
    frozen: bool = False


class DeployRequest(BaseModel):
    """Request model for deploying a collection."""

    name: str = Field(..., description="Collection name", examples=["Nexus Test Collection"])
    symbol: str = Field(..., description="Collection symbol", examples=["NNFT"])
    owner: str | None = Field(
        default=None,
        description="Initial owner; defaults to the caller",
    )


class DeployResponse(BaseModel):
    """Response model for a deployment."""

    collection: CollectionResponse
    receipt: ReceiptResponse


class MintResponse(BaseModel):
    """Response model for a mint."""

    token_id: int
    receipt: ReceiptResponse


class BaseURIRequest(BaseModel):
    """Request model for replacing the base URI."""

    uri: str = Field(..., examples=["https://api.example.com/metadata/"])


class TransferRequest(BaseModel):
    """Request model for transferring a token."""

    from_address: str = Field(..., alias="from")
    to: str
    token_id: int = Field(..., ge=1)

    model_config = {"populate_by_name": True}


class ApproveRequest(BaseModel):
    """Request model for approving a single token."""

    to: str
    token_id: int = Field(..., ge=1)


class OperatorRequest(BaseModel):
    """Request model for granting or revoking an operator."""

    operator: str
    approved: bool


class TokenResponse(BaseModel):
    """A minted token."""

    token_id: int
    owner: str
    approved: str | None = None
    token_uri: str


class TokenURIResponse(BaseModel):
    token_id: int
    token_uri: str


class TotalSupplyResponse(BaseModel):
    address: str
    total_supply: int


class FrozenResponse(BaseModel):
    address: str
    frozen: bool


class BalanceResponse(BaseModel):
    address: str
    owner: str
    balance: int


class LoggedEventResponse(EventResponse):
    """An event together with the transaction that emitted it."""

    tx_hash: str
    block_number: int


class EventListResponse(BaseModel):
    address: str
    events: list[LoggedEventResponse]
    count: int


def _event_response(event: RegistryEvent) -> EventResponse:
    return EventResponse(name=event.name, args=event.args, log_index=event.log_index)


def receipt_response(receipt: Receipt) -> ReceiptResponse:
    """Convert a receipt to its API representation."""
    return ReceiptResponse(
        tx_hash=receipt.tx_hash,
        block_number=receipt.block_number,
        contract_address=receipt.contract_address,
        method=receipt.method,
        sender=receipt.sender,
        status=receipt.status,
        events=[_event_response(e) for e in receipt.events],
    )


def _collection_response(collection: Collection) -> CollectionResponse:
    return CollectionResponse(
        address=collection.address,
        name=collection.name,
        symbol=collection.symbol,
        owner=collection.owner,
        total_supply=collection.total_supply(),
        base_uri=collection.base_uri,
        frozen=collection.frozen,
    )


@router.post("", response_model=DeployResponse, status_code=201)
async def deploy_collection(
    request: DeployRequest,
    registry: Registry,
    caller: Caller,
) -> DeployResponse:
    """
    Deploy a new collection.

    The collection starts empty, unfrozen and with an empty base URI.
    """
    collection, receipt = await registry.deploy(
        request.name, request.symbol, request.owner or caller
    )
    return DeployResponse(
        collection=_collection_response(collection),
        receipt=receipt_response(receipt),
    )


@router.get("/{address}", response_model=CollectionResponse)
async def get_collection_info(address: str, registry: Registry) -> CollectionResponse:
    """Get name, symbol, owner, supply, base URI and freeze state."""
    return _collection_response(await registry.get_collection(address))


@router.post("/{address}/mint", response_model=MintResponse)
async def mint_token(address: str, registry: Registry, caller: Caller) -> MintResponse:
    """
    Mint the next token to the caller.

    Open to any caller.
    """
    token_id, receipt = await registry.mint(address, caller)
    return MintResponse(token_id=token_id, receipt=receipt_response(receipt))


@router.put("/{address}/base-uri", response_model=ReceiptResponse)
async def set_base_uri(
    address: str,
    request: BaseURIRequest,
    registry: Registry,
    caller: Caller,
) -> ReceiptResponse:
    """
    Replace the base URI. Owner only.

    Returns 409 once metadata is frozen and 403 for non-owners.
    """
    return receipt_response(await registry.set_base_uri(address, caller, request.uri))


@router.post("/{address}/freeze", response_model=ReceiptResponse)
async def freeze_metadata(address: str, registry: Registry, caller: Caller) -> ReceiptResponse:
    """Permanently freeze the base URI. Owner only; repeating it is a no-op."""
    return receipt_response(await registry.freeze(address, caller))


@router.post("/{address}/transfer", response_model=ReceiptResponse)
async def transfer_token(
    address: str,
    request: TransferRequest,
    registry: Registry,
    caller: Caller,
) -> ReceiptResponse:
    """Transfer a token. The caller must hold it or be approved for it."""
    receipt = await registry.transfer_from(
        address, caller, request.from_address, request.to, request.token_id
    )
    return receipt_response(receipt)


@router.post("/{address}/approve", response_model=ReceiptResponse)
async def approve_token(
    address: str,
    request: ApproveRequest,
    registry: Registry,
    caller: Caller,
) -> ReceiptResponse:
    """Approve an address to transfer one token."""
    return receipt_response(
        await registry.approve(address, caller, request.to, request.token_id)
    )


@router.put("/{address}/operators", response_model=ReceiptResponse)
async def set_operator(
    address: str,
    request: OperatorRequest,
    registry: Registry,
    caller: Caller,
) -> ReceiptResponse:
    """Grant or revoke an operator over all of the caller's tokens."""
    return receipt_response(
        await registry.set_approval_for_all(address, caller, request.operator, request.approved)
    )


@router.get("/{address}/tokens/{token_id}", response_model=TokenResponse)
async def get_token(address: str, token_id: int, registry: Registry) -> TokenResponse:
    """Get the holder, approval and URI of a minted token. 404 if unminted."""
    token = await registry.get_token(address, token_id)
    return TokenResponse(
        token_id=token.token_id,
        owner=token.owner,
        approved=token.approved,
        token_uri=await registry.token_uri(address, token_id),
    )


@router.get("/{address}/tokens/{token_id}/uri", response_model=TokenURIResponse)
async def get_token_uri(address: str, token_id: int, registry: Registry) -> TokenURIResponse:
    """Get the metadata URI of a token. 404 if unminted."""
    token_uri = await registry.token_uri(address, token_id)
    return TokenURIResponse(token_id=token_id, token_uri=token_uri)


@router.get("/{address}/total-supply", response_model=TotalSupplyResponse)
async def get_total_supply(address: str, registry: Registry) -> TotalSupplyResponse:
    """Number of tokens minted so far."""
    return TotalSupplyResponse(
        address=address.lower(), total_supply=await registry.total_supply(address)
    )


@router.get("/{address}/frozen", response_model=FrozenResponse)
async def get_frozen(address: str, registry: Registry) -> FrozenResponse:
    """Whether the base URI is frozen."""
    frozen = await registry.is_metadata_frozen(address)
    return FrozenResponse(address=address.lower(), frozen=frozen)


@router.get("/{address}/balance/{owner}", response_model=BalanceResponse)
async def get_balance(address: str, owner: str, registry: Registry) -> BalanceResponse:
    """Number of tokens held by an address."""
    balance = await registry.balance_of(address, owner)
    return BalanceResponse(address=address.lower(), owner=owner.lower(), balance=balance)


@router.get("/{address}/events", response_model=EventListResponse)
async def get_events(
    address: str,
    registry: Registry,
    name: str | None = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> EventListResponse:
    """Get emitted events in emission order, optionally filtered by name."""
    rows = await registry.events(address, name=name, limit=limit)
    events = [
        LoggedEventResponse(
            name=event.name,
            args=event.args,
            log_index=event.log_index,
            tx_hash=tx_hash,
            block_number=block_number,
        )
        for event, tx_hash, block_number in rows
    ]
    return EventListResponse(address=address.lower(), events=events, count=len(events))
