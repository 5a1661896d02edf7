"""
Collection image upload endpoint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from nexusnft.services.collection_assets import upload_collection_image
from nexusnft.storage import AssetStore, get_asset_store


router = APIRouter(tags=["upload"])


class UploadResponse(BaseModel):
    """Response model for a stored collection image."""

    success: bool = True
    url: str
    path: str


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    store: Annotated[AssetStore, Depends(get_asset_store)],
    file: Annotated[UploadFile | None, File()] = None,
    contract_address: Annotated[str | None, Form(alias="contractAddress")] = None,
    token_id: Annotated[str | None, Form(alias="tokenId")] = None,
) -> UploadResponse:
    """
    Store the image for a collection.

    The file lands at `collections/<address>/collection-<sanitized name>`,
    replacing any earlier upload with the same name.
    """
    data = await file.read() if file is not None else None
    asset, url = await upload_collection_image(
        store,
        contract_address,
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        data,
        token_id=token_id,
    )
    return UploadResponse(url=url, path=asset.path)
