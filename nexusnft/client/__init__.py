from nexusnft.client.errors import TransactionFailedError, UserCancelledError
from nexusnft.client.gallery import (
    DeployResult,
    GalleryClient,
    GalleryItem,
    ImageUpload,
    parse_receipt,
)
from nexusnft.client.signer import Signer, approve_all
from nexusnft.client.status import StatusMessage
from nexusnft.client.symbols import generate_symbol

__all__ = [
    "DeployResult",
    "GalleryClient",
    "GalleryItem",
    "ImageUpload",
    "Signer",
    "StatusMessage",
    "TransactionFailedError",
    "UserCancelledError",
    "approve_all",
    "generate_symbol",
    "parse_receipt",
]
