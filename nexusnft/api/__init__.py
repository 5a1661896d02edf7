from nexusnft.api.assets import router as assets_router
from nexusnft.api.collections import router as collections_router
from nexusnft.api.contract import router as contract_router
from nexusnft.api.health import router as health_router
from nexusnft.api.image import router as image_router
from nexusnft.api.metadata import router as metadata_router
from nexusnft.api.transactions import router as transactions_router
from nexusnft.api.upload import router as upload_router

__all__ = [
    "assets_router",
    "collections_router",
    "contract_router",
    "health_router",
    "image_router",
    "metadata_router",
    "transactions_router",
    "upload_router",
]
