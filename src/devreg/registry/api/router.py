"""FastAPI router for user and device-assignment endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Query

from ...exceptions import InvalidRequestError
from ..state import RegistryState
from ..use_cases import (
    AddUserUseCase,
    AssignDeviceUseCase,
    ListUserDevicesUseCase,
    ReleaseDeviceUseCase,
)
from .dependencies import get_registry_state
from .schemas import ErrorResponse, MessageResponse, UserDeviceDTO, UserDevicesResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users & Assignments"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "User or device not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Missing input or conflicting state"}}


def _require(value: Optional[str], field: str) -> str:
    if not value:
        raise InvalidRequestError(f"{field} is required", field=field)
    return value


@router.post(
    "/add_user",
    response_model=MessageResponse,
    responses=BAD_REQUEST,
    summary="Add a new user",
)
async def add_user(
    name: Annotated[Optional[str], Form()] = None,
    surname: Annotated[Optional[str], Form()] = None,
    login: Annotated[Optional[str], Form()] = None,
    password: Annotated[Optional[str], Form()] = None,
    state: RegistryState = Depends(get_registry_state),
):
    """Add a new user with the provided details.

    The login must not be used by another user. The new user starts
    with no devices.
    """
    use_case = AddUserUseCase(state)
    await use_case.execute(name=name, login=login, surname=surname, password=password)
    return MessageResponse(message="User added successfully")


@router.post(
    "/add_device_to_user",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Add a device to a user",
)
async def add_device_to_user(
    device_identifier: Annotated[Optional[str], Form(alias="deviceIdentifier")] = None,
    username: Annotated[Optional[str], Form()] = None,
    state: RegistryState = Depends(get_registry_state),
):
    """Assign a device to a user.

    Fails with 400 if the device is already in use, even by the same user.
    """
    device_identifier = _require(device_identifier, "deviceIdentifier")
    username = _require(username, "username")

    use_case = AssignDeviceUseCase(state)
    await use_case.execute(device_identifier, username)
    return MessageResponse(message="Device added to the user successfully")


@router.post(
    "/remove_device_from_user",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Remove a device from a user",
)
async def remove_device_from_user(
    device_identifier: Annotated[Optional[str], Form(alias="deviceIdentifier")] = None,
    username: Annotated[Optional[str], Form()] = None,
    state: RegistryState = Depends(get_registry_state),
):
    """Release a device from the user holding it.

    The catalog device goes back to "no used" / "available". The entry is
    removed from the user's list even if the device was deleted meanwhile.
    """
    device_identifier = _require(device_identifier, "deviceIdentifier")
    username = _require(username, "username")

    use_case = ReleaseDeviceUseCase(state)
    await use_case.execute(device_identifier, username)
    return MessageResponse(message="The device removed from user successfully")


@router.get(
    "/user_devices",
    response_model=UserDevicesResponse,
    responses={**BAD_REQUEST, **NOT_FOUND},
    summary="Get devices of a user",
)
async def user_devices(
    username: Annotated[Optional[str], Query(description="Name of the user")] = None,
    state: RegistryState = Depends(get_registry_state),
):
    """List the devices recorded under a user, as recorded at assignment time."""
    username = _require(username, "username")

    use_case = ListUserDevicesUseCase(state)
    entries = use_case.execute(username)
    return UserDevicesResponse(
        username=username,
        devices=[UserDeviceDTO(**entry.to_dict()) for entry in entries],
    )
