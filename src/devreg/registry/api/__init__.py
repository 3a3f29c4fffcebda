"""API layer for the device registry.

Contains:
- FastAPI routers with endpoints
- Pydantic schemas for request/response validation
"""

from .catalog_router import router as catalog_router
from .router import router
from .schemas import (
    DeviceDTO,
    DeviceInfoDTO,
    EditProductRequest,
    ErrorResponse,
    MessageResponse,
    RegistryDTO,
    UserDeviceDTO,
    UserDevicesResponse,
    UserDTO,
)

__all__ = [
    "router",
    "catalog_router",
    "DeviceDTO",
    "DeviceInfoDTO",
    "EditProductRequest",
    "ErrorResponse",
    "MessageResponse",
    "RegistryDTO",
    "UserDeviceDTO",
    "UserDevicesResponse",
    "UserDTO",
]
