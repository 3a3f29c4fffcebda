"""FastAPI dependency injection for the registry API.

Lifecycle Management:
- Registry state: loaded from the document store at startup, shared
  across requests, checkpointed by each mutation
- Photo store: created at startup, shared across requests

Both are released at application shutdown.
"""

import logging
from typing import Optional

from ...config import Settings
from ..adapters import JsonFileDocumentStore, LocalPhotoStore
from ..domain.ports import IPhotoStore
from ..state import RegistryState

logger = logging.getLogger(__name__)

# ========== Global State ==========

_settings: Optional[Settings] = None
_registry_state: Optional[RegistryState] = None
_photo_store: Optional[LocalPhotoStore] = None


async def init_registry(settings: Settings) -> RegistryState:
    """Load the registry document and prepare the photo store.

    Should be called on application startup.
    """
    global _settings, _registry_state, _photo_store

    _settings = settings
    _photo_store = LocalPhotoStore(settings.upload_dir)
    await _photo_store.ensure_directory()

    state = RegistryState(JsonFileDocumentStore(settings.data_file))
    await state.load()
    _registry_state = state
    return state


async def close_registry():
    """Drop the shared registry objects.

    Should be called on application shutdown. Every mutation is already
    checkpointed, so there is nothing to flush.
    """
    global _settings, _registry_state, _photo_store
    _registry_state = None
    _photo_store = None
    _settings = None
    logger.info("Registry state released")


# ========== Dependency Functions ==========


def get_registry_state() -> RegistryState:
    """Get the shared registry state."""
    if _registry_state is None:
        raise RuntimeError("Registry not initialized. Call init_registry() first.")
    return _registry_state


def get_photo_store() -> IPhotoStore:
    """Get the shared photo store."""
    if _photo_store is None:
        raise RuntimeError("Registry not initialized. Call init_registry() first.")
    return _photo_store


def get_settings() -> Settings:
    """Get the settings the registry was started with."""
    if _settings is None:
        raise RuntimeError("Registry not initialized. Call init_registry() first.")
    return _settings
