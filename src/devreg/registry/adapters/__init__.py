"""Infrastructure adapters for the device registry.

These adapters implement the port interfaces defined in the domain layer,
connecting the registry to the local file system.
"""

from .json_store import JsonFileDocumentStore
from .photo_store import LocalPhotoStore, safe_filename

__all__ = [
    "JsonFileDocumentStore",
    "LocalPhotoStore",
    "safe_filename",
]
