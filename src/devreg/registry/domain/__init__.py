"""Domain layer for the device registry.

Contains:
- Entities: Devices, users and the registry document with its assignment rules
- Ports: Interface definitions for storage adapters
"""

from .entities import (
    AVAILABLE,
    EDITABLE_DEVICE_FIELDS,
    Device,
    DeviceUsage,
    RegistryDocument,
    User,
    UserDevice,
)
from .ports import IDocumentStore, IPhotoStore

__all__ = [
    # Entities
    "AVAILABLE",
    "EDITABLE_DEVICE_FIELDS",
    "Device",
    "DeviceUsage",
    "RegistryDocument",
    "User",
    "UserDevice",
    # Ports
    "IDocumentStore",
    "IPhotoStore",
]
