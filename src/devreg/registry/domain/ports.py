"""Port interfaces for the device registry.

These are abstract interfaces (ports) that define how the domain
interacts with storage. Concrete implementations (adapters) are
provided in the adapters module.

This follows the Hexagonal Architecture pattern.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from .entities import RegistryDocument


class IDocumentStore(ABC):
    """Port for persisting the registry document.

    Implementations might use a JSON file, an embedded key-value store, etc.
    """

    @abstractmethod
    async def load(self) -> RegistryDocument:
        """Read the stored document.

        Returns:
            The stored document, or an empty one if nothing usable is stored

        Raises:
            StorageError: If the storage medium cannot be read
        """
        ...

    @abstractmethod
    async def save(self, document: RegistryDocument) -> None:
        """Replace the stored document with `document`.

        Raises:
            StorageError: If the document cannot be written
        """
        ...


class IPhotoStore(ABC):
    """Port for the device photo content store."""

    @abstractmethod
    async def save(self, filename: str, content: bytes) -> str:
        """Store a photo under its original filename.

        Args:
            filename: Filename supplied by the uploader
            content: Raw image bytes

        Returns:
            The name the photo was stored under

        Raises:
            StorageError: If the photo cannot be written
        """
        ...

    @abstractmethod
    async def delete(self, filename: str) -> None:
        """Remove a stored photo. A missing photo is not an error.

        Raises:
            StorageError: If the photo exists but cannot be removed
        """
        ...

    @abstractmethod
    def resolve(self, filename: str) -> Path:
        """Locate a stored photo.

        Raises:
            PhotoNotFoundError: If no photo is stored under `filename`
        """
        ...
