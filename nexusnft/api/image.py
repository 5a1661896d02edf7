"""
Generated token image endpoint.
"""

from fastapi import APIRouter, Response

from nexusnft.services.image_synthesizer import synthesize
from nexusnft.services.metadata_resolver import IMMUTABLE

router = APIRouter(tags=["image"])


@router.get("/image/{token_id}")
async def get_image(token_id: str) -> Response:
    """
    Render the deterministic SVG for a token.

    The output depends only on the token ID, so it is served as
    immutable.
    """
    return Response(
        content=synthesize(token_id),
        media_type="image/svg+xml",
        headers={"Cache-Control": IMMUTABLE},
    )
