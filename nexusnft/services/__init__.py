from nexusnft.services.collection_assets import (
    collection_asset_path,
    collection_folder,
    find_collection_image,
    sanitize_filename,
    upload_collection_image,
)
from nexusnft.services.image_synthesizer import synthesize, token_color, token_hash
from nexusnft.services.metadata_resolver import (
    build_metadata,
    find_uploaded_image,
    generated_image_url,
    metadata_base_uri,
    resolve_metadata,
)
from nexusnft.services.registry import TokenRegistry

__all__ = [
    "TokenRegistry",
    "build_metadata",
    "collection_asset_path",
    "collection_folder",
    "find_collection_image",
    "find_uploaded_image",
    "generated_image_url",
    "metadata_base_uri",
    "resolve_metadata",
    "sanitize_filename",
    "synthesize",
    "token_color",
    "token_hash",
    "upload_collection_image",
]
