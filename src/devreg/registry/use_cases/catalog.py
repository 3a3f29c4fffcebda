"""Device catalog use cases.

Devices enter the catalog through a photo upload and can afterwards be
listed, edited and deleted. Deleting a device does not touch user device
lists, so a user may keep a stale entry for a deleted device.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ...exceptions import (
    DeviceNotFoundError,
    EmptyUploadError,
    InvalidRequestError,
    PhotoNotFoundError,
    StorageError,
    UploadTooLargeError,
)
from ..domain.entities import Device, RegistryDocument
from ..domain.ports import IPhotoStore
from ..state import RegistryState

logger = logging.getLogger(__name__)

# Default photo size limit, overridden from Settings
MAX_UPLOAD_SIZE_MB = 10


@dataclass
class DeviceUpload:
    """Form fields accompanying an uploaded photo."""

    identifier: Optional[str]
    name: Optional[str] = None
    description: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None


class UploadDeviceUseCase:
    """Store a photo and register the device it depicts."""

    def __init__(
        self,
        state: RegistryState,
        photo_store: IPhotoStore,
        max_upload_size_bytes: int = MAX_UPLOAD_SIZE_MB * 1024 * 1024,
    ):
        self.state = state
        self.photo_store = photo_store
        self.max_upload_size_bytes = max_upload_size_bytes

    async def execute(self, upload: DeviceUpload, filename: str, content: bytes) -> Device:
        """Save the photo, then append the device to the catalog.

        Raises:
            InvalidRequestError: If the identifier is missing
            EmptyUploadError: If the photo has no content
            UploadTooLargeError: If the photo exceeds the size limit
            StorageError: If the photo or the registry cannot be written
        """
        if not upload.identifier:
            raise InvalidRequestError("Identifier is required", field="identifier")
        if not content:
            raise EmptyUploadError(filename)
        if len(content) > self.max_upload_size_bytes:
            raise UploadTooLargeError(len(content), self.max_upload_size_bytes)

        replaces_photo = self._photo_exists(filename)
        stored_name = await self.photo_store.save(filename, content)

        device = Device(
            identifier=upload.identifier,
            name=upload.name,
            description=upload.description,
            serial_number=upload.serial_number,
            manufacturer=upload.manufacturer,
            filename=stored_name,
        )

        try:
            async with self.state.transaction() as doc:
                if doc.find_device(device.identifier) is not None:
                    logger.warning(
                        f"Device identifier {device.identifier} already exists; "
                        "lookups will keep returning the earlier entry"
                    )
                doc.add_device(device)
        except Exception:
            # A replaced photo cannot be restored, only a new one removed
            if not replaces_photo:
                await self._discard_photo(stored_name)
            raise

        logger.info(f"Registered device {device.identifier} with photo {stored_name}")
        return device

    def _photo_exists(self, filename: str) -> bool:
        try:
            self.photo_store.resolve(filename)
        except PhotoNotFoundError:
            return False
        return True

    async def _discard_photo(self, stored_name: str) -> None:
        try:
            await self.photo_store.delete(stored_name)
        except StorageError as e:
            logger.warning(f"Could not remove photo {stored_name} after failed upload: {e}")


class GetDeviceInfoUseCase:
    """Public device details, for one device or the whole catalog."""

    def __init__(self, state: RegistryState):
        self.state = state

    def list_all(self) -> list[dict[str, Any]]:
        return [d.info() for d in self.state.document.devices]

    def get(self, identifier: str) -> dict[str, Any]:
        return self.state.document.get_device(identifier).info()


class GetDevicePhotoUseCase:
    """Resolve the stored photo of a device."""

    def __init__(self, state: RegistryState, photo_store: IPhotoStore):
        self.state = state
        self.photo_store = photo_store

    def execute(self, identifier: Optional[str]) -> Path:
        """
        Raises:
            InvalidRequestError: If no identifier is given
            DeviceNotFoundError: If the device does not exist
            PhotoNotFoundError: If the device has no stored photo
        """
        if not identifier:
            raise InvalidRequestError(
                "Identifier not provided in the query parameters", field="identifier"
            )
        device = self.state.document.get_device(identifier)
        return self.photo_store.resolve(device.filename)


class GetRegistryUseCase:
    """Snapshot of the whole registry document."""

    def __init__(self, state: RegistryState):
        self.state = state

    def execute(self) -> RegistryDocument:
        return self.state.snapshot()


class UpdateDeviceUseCase:
    """Partially update a catalog device."""

    def __init__(self, state: RegistryState):
        self.state = state

    async def execute(self, identifier: str, changes: dict[str, Any]) -> Device:
        """Apply `changes` to the first device with `identifier`.

        Args:
            identifier: Device to edit
            changes: Attribute name -> new value, only for fields the
                caller supplied

        Raises:
            DeviceNotFoundError: If no device has the identifier
        """
        async with self.state.transaction() as doc:
            device = doc.find_device(identifier)
            if device is None:
                raise DeviceNotFoundError(identifier, message="Product not found")
            try:
                written = device.apply_update(changes)
            except ValueError as e:
                raise InvalidRequestError(str(e)) from e

        logger.info(f"Edited device {identifier}: {', '.join(written) or 'no fields'}")
        return device


class DeleteDeviceUseCase:
    """Delete a device from the catalog without cascading to users."""

    def __init__(self, state: RegistryState):
        self.state = state

    async def execute(self, identifier: Optional[str]) -> Device:
        if not identifier:
            raise InvalidRequestError("Identifier is required", field="identifier")

        async with self.state.transaction() as doc:
            device = doc.remove_device(identifier)
            holders = [
                u.name for u in doc.users if u.find_device_index(device.identifier) is not None
            ]

        if holders:
            logger.warning(
                f"Deleted device {identifier} is still listed under users: {', '.join(holders)}"
            )
        else:
            logger.info(f"Deleted device {identifier}")
        return device
