"""
Token metadata endpoints.

Serves OpenSea-compatible JSON for any (contract, token) pair. The
document is rebuilt on every request and must never be cached, since
the collection image can change after the first fetch.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from nexusnft.config import settings
from nexusnft.services.metadata_resolver import NO_STORE, resolve_metadata
from nexusnft.storage import AssetStore, get_asset_store

router = APIRouter(tags=["metadata"])

Store = Annotated[AssetStore, Depends(get_asset_store)]


async def _metadata_response(
    store: AssetStore, contract: str | None, token_id: str | None
) -> JSONResponse:
    metadata = await resolve_metadata(
        store,
        contract,
        token_id,
        api_url=settings.api_url,
        website_url=settings.website_url,
        network_name=settings.network_name,
    )
    return JSONResponse(
        content=metadata.model_dump(mode="json", exclude_none=True),
        headers={"Cache-Control": NO_STORE},
    )


@router.get("/metadata")
async def get_metadata(
    store: Store,
    contract: str | None = None,
    token_id: Annotated[str | None, Query(alias="tokenId")] = None,
) -> JSONResponse:
    """
    Resolve metadata from query parameters.

    This is the form produced by base URIs of the shape
    `/metadata?contract=<address>&tokenId=`.
    """
    return await _metadata_response(store, contract, token_id)


@router.get("/metadata/{token_id}")
async def get_metadata_by_path(
    token_id: str,
    store: Store,
    contract: str | None = None,
) -> JSONResponse:
    """Resolve metadata with the token ID in the path."""
    return await _metadata_response(store, contract, token_id)
