"""
Asset serving endpoint.

Serves objects from the configured asset store. For the local store
this is where download URLs point; for Firebase the download URLs point
at Firebase itself and this endpoint is only a convenience.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from nexusnft.storage import AssetStore, get_asset_store

router = APIRouter(tags=["assets"])


@router.get("/assets/{path:path}")
async def get_asset(
    path: str,
    store: Annotated[AssetStore, Depends(get_asset_store)],
) -> Response:
    """Return the bytes of a stored object."""
    try:
        content = await store.read(path)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset not found: {path}",
        ) from None
    return Response(content=content.data, media_type=content.content_type)
