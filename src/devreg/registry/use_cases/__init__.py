"""Use cases for the device registry.

Each use case represents a single user action and orchestrates
domain logic without knowing about infrastructure details.
"""

from .assignments import (
    AssignDeviceUseCase,
    ListUserDevicesUseCase,
    ReleaseDeviceUseCase,
    ReleaseResult,
)
from .catalog import (
    DeleteDeviceUseCase,
    DeviceUpload,
    GetDeviceInfoUseCase,
    GetDevicePhotoUseCase,
    GetRegistryUseCase,
    UpdateDeviceUseCase,
    UploadDeviceUseCase,
)
from .users import AddUserUseCase

__all__ = [
    "AssignDeviceUseCase",
    "ReleaseDeviceUseCase",
    "ReleaseResult",
    "ListUserDevicesUseCase",
    "DeviceUpload",
    "UploadDeviceUseCase",
    "GetDeviceInfoUseCase",
    "GetDevicePhotoUseCase",
    "GetRegistryUseCase",
    "UpdateDeviceUseCase",
    "DeleteDeviceUseCase",
    "AddUserUseCase",
]
