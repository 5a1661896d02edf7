from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Nexus NFT"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/nexusnft"

    # Public origins used when rendering metadata documents
    api_url: str = "http://localhost:3000"
    website_url: str = "http://localhost:3000"

    network_name: str = "Nexus"
    chain_id: int = 393
    explorer_url: str = "https://explorer.nexus.xyz"

    # Asset store backend: "local" keeps files under asset_dir,
    # "firebase" talks to the Firebase Storage REST API
    asset_store: str = "local"
    asset_dir: str = "data/assets"
    firebase_bucket: str = ""
    firebase_base_url: str = "https://firebasestorage.googleapis.com"
    firebase_auth_token: str = ""

    receipt_poll_interval: float = 1.0
    receipt_timeout: float = 60.0


settings = Settings()


# =============================================================================
# REGISTRY CONSTANTS
# =============================================================================

ZERO_ADDRESS = "0x" + "0" * 40

# Upper bound of the token ID space, used for collection-wide metadata updates
MAX_TOKEN_ID = 2**256 - 1

# Object name prefix marking a collection image in the asset store
COLLECTION_ASSET_PREFIX = "collection-"
