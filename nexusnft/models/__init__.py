from nexusnft.models.collection import Collection, Token
from nexusnft.models.event import Receipt, RegistryEvent
from nexusnft.models.failure import (
    ApiResponse,
    CollectionNotFoundError,
    FailureDetail,
    FailureKind,
    InvalidInputError,
    InvalidMetadataError,
    KnownError,
    MetadataFrozenError,
    MissingParameterError,
    OutcomeType,
    RefusalError,
    TokenNotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
)
from nexusnft.models.metadata import MetadataAttribute, NFTMetadata, validate_metadata

__all__ = [
    "ApiResponse",
    "Collection",
    "CollectionNotFoundError",
    "FailureDetail",
    "FailureKind",
    "InvalidInputError",
    "InvalidMetadataError",
    "KnownError",
    "MetadataAttribute",
    "MetadataFrozenError",
    "MissingParameterError",
    "NFTMetadata",
    "OutcomeType",
    "Receipt",
    "RefusalError",
    "RegistryEvent",
    "Token",
    "TokenNotFoundError",
    "UnauthorizedError",
    "UpstreamUnavailableError",
    "validate_metadata",
]
