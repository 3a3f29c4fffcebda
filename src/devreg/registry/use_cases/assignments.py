"""Assignment use cases.

Assign hands a free device to a user, Release takes it back, and
ListUserDevices reports what a user holds. The rules themselves live on
RegistryDocument; these classes run them inside a registry transaction
so every change is serialized and checkpointed.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.entities import UserDevice
from ..state import RegistryState

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
    """Outcome of releasing a device from a user."""

    identifier: str
    username: str
    device_reset: bool  # False when the catalog entry no longer exists


class AssignDeviceUseCase:
    """Assign a device to a user.

    Raises UserNotFoundError, DeviceNotFoundError or
    DeviceAlreadyAssignedError; the registry is unchanged in every case.
    """

    def __init__(self, state: RegistryState):
        self.state = state

    async def execute(self, device_identifier: str, username: str) -> UserDevice:
        async with self.state.transaction() as doc:
            entry = doc.assign(device_identifier, username)

        logger.info(f"Assigned device {device_identifier} to user {username}")
        return entry


class ReleaseDeviceUseCase:
    """Release a device from the user holding it."""

    def __init__(self, state: RegistryState):
        self.state = state

    async def execute(self, device_identifier: str, username: str) -> ReleaseResult:
        async with self.state.transaction() as doc:
            device = doc.release(device_identifier, username)

        if device is None:
            logger.warning(
                f"Released device {device_identifier} from user {username}; "
                "no catalog entry left to reset"
            )
        else:
            logger.info(f"Released device {device_identifier} from user {username}")

        return ReleaseResult(
            identifier=str(device_identifier),
            username=username,
            device_reset=device is not None,
        )


class ListUserDevicesUseCase:
    """List the devices recorded under a user."""

    def __init__(self, state: RegistryState):
        self.state = state

    def execute(self, username: Optional[str]) -> list[UserDevice]:
        return self.state.snapshot().user_devices(username)
