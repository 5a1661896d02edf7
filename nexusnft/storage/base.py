"""
Asset store interface.

Collection images live in an object store namespaced by contract
address. The service only needs four things from a store: list a folder,
write an object, turn an object into a retrievable URL, and read an
object back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class StoredAsset:
    """An object in the asset store."""

    path: str
    content_type: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Object name without its folder."""
        return self.path.rsplit("/", 1)[-1]


@dataclass
class AssetContent:
    """Raw bytes of an object and their media type."""

    data: bytes
    content_type: str


class AssetStore(ABC):
    """
    Object storage for uploaded collection images.

    Implementations raise UpstreamUnavailableError when the backing
    store cannot be reached and FileNotFoundError for missing objects.
    """

    @abstractmethod
    async def list_folder(self, folder: str) -> list[StoredAsset]:
        """List objects directly inside a folder, sorted by name."""

    @abstractmethod
    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> StoredAsset:
        """Write an object, replacing any existing object at the same path."""

    @abstractmethod
    async def download_url(self, path: str) -> str:
        """Resolve a URL from which the object can be fetched."""

    @abstractmethod
    async def read(self, path: str) -> AssetContent:
        """Read an object's bytes."""
