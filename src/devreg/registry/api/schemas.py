"""Pydantic schemas for API request/response validation."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """Confirmation returned by every successful mutation."""

    message: str


class ErrorResponse(BaseModel):
    """Structured error payload."""

    error: str
    code: Optional[str] = None


class DeviceInfoDTO(BaseModel):
    """Public device details (no photo filename, usage or holder)."""

    model_config = ConfigDict(populate_by_name=True)

    identifier: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    serial_number: Optional[str] = Field(None, alias="serialNumber")
    manufacturer: Optional[str] = None


class DeviceDTO(DeviceInfoDTO):
    """Full catalog device as stored in the registry, unknown keys included."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    filename: Optional[str] = None
    usage: str = "no used"
    user: str = "available"


class UserDeviceDTO(BaseModel):
    """Device entry in a user's list."""

    model_config = ConfigDict(extra="allow")

    identifier: Optional[str] = None
    usage: str


class UserDTO(BaseModel):
    """User as stored in the registry."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    surname: Optional[str] = None
    login: Optional[str] = None
    password: Optional[str] = None
    devices: list[UserDeviceDTO] = Field(default_factory=list)


class RegistryDTO(BaseModel):
    """The whole registry document."""

    model_config = ConfigDict(extra="allow")

    devices: list[DeviceDTO] = Field(default_factory=list)
    users: list[UserDTO] = Field(default_factory=list)


class UserDevicesResponse(BaseModel):
    """Devices recorded under a user."""

    username: str
    devices: list[UserDeviceDTO] = Field(default_factory=list)


class EditProductRequest(BaseModel):
    """Partial device update.

    Fields left out of the request body keep their stored value.
    Fields sent as null are cleared.
    """

    model_config = ConfigDict(populate_by_name=True)

    identifier: Union[str, int] = Field(..., description="Identifier of the device to edit")
    name: Optional[str] = None
    description: Optional[str] = None
    serial_number: Optional[str] = Field(None, alias="serialNumber")
    manufacturer: Optional[str] = None

    def changes(self) -> dict[str, Optional[str]]:
        """Attribute -> value for the editable fields present in the body."""
        return self.model_dump(exclude_unset=True, exclude={"identifier"}, by_alias=False)
