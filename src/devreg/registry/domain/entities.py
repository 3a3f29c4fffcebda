"""Domain entities for the device registry.

These are pure domain objects with no infrastructure dependencies. The
RegistryDocument holds both collections and owns the assignment rules that
keep a device's usage/user fields consistent with its holder's device list.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ...exceptions import (
    DeviceAlreadyAssignedError,
    DeviceNotFoundError,
    DeviceNotInUserListError,
    DuplicateLoginError,
    UserNotFoundError,
)

AVAILABLE = "available"


class DeviceUsage(str, Enum):
    """Usage state of a catalog device, as stored in the document."""

    NOT_USED = "no used"
    IN_USE = "is use"


# Editable device attributes and their on-disk keys
EDITABLE_DEVICE_FIELDS: dict[str, str] = {
    "name": "name",
    "description": "description",
    "serial_number": "serialNumber",
    "manufacturer": "manufacturer",
}


def _as_identifier(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _usage_value(value: Any) -> str:
    if isinstance(value, DeviceUsage):
        return value.value
    return value


def _unknown_keys(data: dict[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def _records(value: Any) -> list[dict[str, Any]]:
    """Object entries of a stored collection; anything else reads as empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _with_extra(data: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    for key, value in extra.items():
        data.setdefault(key, value)
    return data


@dataclass
class Device:
    """A catalog entry for a physical item with an uploaded photo.

    Keys of a stored device that are not modelled here are kept in `extra`
    and written back unchanged.
    """

    KEYS = (
        "identifier",
        "name",
        "description",
        "serialNumber",
        "manufacturer",
        "filename",
        "usage",
        "user",
    )

    identifier: Optional[str]
    name: Optional[str] = None
    description: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    filename: Optional[str] = None
    usage: str = DeviceUsage.NOT_USED.value
    user: str = AVAILABLE
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.identifier = _as_identifier(self.identifier)
        self.usage = _usage_value(self.usage)

    @property
    def is_in_use(self) -> bool:
        return self.usage == DeviceUsage.IN_USE.value

    def mark_assigned(self, username: str) -> None:
        self.usage = DeviceUsage.IN_USE.value
        self.user = username

    def mark_available(self) -> None:
        self.usage = DeviceUsage.NOT_USED.value
        self.user = AVAILABLE

    def apply_update(self, changes: dict[str, Any]) -> list[str]:
        """Overwrite the editable fields present in `changes`.

        Keys absent from `changes` keep their current value; a key present
        with None clears the field.

        Returns:
            Names of the fields that were written
        """
        written = []
        for attr, value in changes.items():
            if attr not in EDITABLE_DEVICE_FIELDS:
                raise ValueError(f"Field '{attr}' is not editable")
            setattr(self, attr, value)
            written.append(attr)
        return written

    def info(self) -> dict[str, Any]:
        """Public projection returned by the photo-info endpoint."""
        return {
            "identifier": self.identifier,
            "name": self.name,
            "description": self.description,
            "serialNumber": self.serial_number,
            "manufacturer": self.manufacturer,
        }

    def to_dict(self) -> dict[str, Any]:
        data = self.info()
        data.update(
            {
                "filename": self.filename,
                "usage": self.usage,
                "user": self.user,
            }
        )
        return _with_extra(data, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Device":
        return cls(
            identifier=data.get("identifier"),
            name=data.get("name"),
            description=data.get("description"),
            serial_number=data.get("serialNumber"),
            manufacturer=data.get("manufacturer"),
            filename=data.get("filename"),
            usage=data.get("usage") or DeviceUsage.NOT_USED.value,
            user=data.get("user") or AVAILABLE,
            extra=_unknown_keys(data, cls.KEYS),
        )


@dataclass
class UserDevice:
    """A device entry in a user's list, recorded at assignment time."""

    KEYS = ("identifier", "usage")

    identifier: Optional[str]
    usage: str = DeviceUsage.IN_USE.value
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.identifier = _as_identifier(self.identifier)
        self.usage = _usage_value(self.usage)

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"identifier": self.identifier, "usage": self.usage}, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserDevice":
        return cls(
            identifier=data.get("identifier"),
            usage=data.get("usage") or DeviceUsage.IN_USE.value,
            extra=_unknown_keys(data, cls.KEYS),
        )


@dataclass
class User:
    """A registered user. Looked up by `name`; `login` is unique."""

    KEYS = ("name", "surname", "login", "password", "devices")

    name: Optional[str]
    surname: Optional[str] = None
    login: Optional[str] = None
    password: Optional[str] = None
    devices: list[UserDevice] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def find_device_index(self, identifier: str) -> Optional[int]:
        for index, entry in enumerate(self.devices):
            if entry.identifier == identifier:
                return index
        return None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "surname": self.surname,
            "login": self.login,
            "password": self.password,
            "devices": [d.to_dict() for d in self.devices],
        }
        return _with_extra(data, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            name=data.get("name"),
            surname=data.get("surname"),
            login=data.get("login"),
            password=data.get("password"),
            devices=[UserDevice.from_dict(d) for d in _records(data.get("devices"))],
            extra=_unknown_keys(data, cls.KEYS),
        )


@dataclass
class RegistryDocument:
    """The whole registry: the device catalog plus the user list.

    Lookups are linear scans and the first match wins, since identifiers
    are caller-supplied and not guaranteed unique.
    """

    KEYS = ("devices", "users")

    devices: list[Device] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    # ---------- lookups ----------

    def find_device(self, identifier: Optional[str]) -> Optional[Device]:
        identifier = _as_identifier(identifier)
        for device in self.devices:
            if device.identifier == identifier:
                return device
        return None

    def find_user(self, username: Optional[str]) -> Optional[User]:
        for user in self.users:
            if user.name == username:
                return user
        return None

    def get_device(self, identifier: Optional[str]) -> Device:
        device = self.find_device(identifier)
        if device is None:
            raise DeviceNotFoundError(identifier)
        return device

    def get_user(self, username: Optional[str]) -> User:
        user = self.find_user(username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    # ---------- assignment rules ----------

    def assign(self, device_identifier: str, username: str) -> UserDevice:
        """Hand a free device to a user.

        All checks run before anything is written, so a failed call leaves
        the document untouched.

        Raises:
            UserNotFoundError: No user is named `username`
            DeviceNotFoundError: No device has `device_identifier`
            DeviceAlreadyAssignedError: The device is in use, even by `username`
        """
        user = self.get_user(username)
        device = self.get_device(device_identifier)
        if device.is_in_use:
            raise DeviceAlreadyAssignedError(device.identifier, holder=device.user)

        device.mark_assigned(username)
        entry = UserDevice(identifier=device.identifier, usage=DeviceUsage.IN_USE.value)
        user.devices.append(entry)
        return entry

    def release(self, device_identifier: str, username: str) -> Optional[Device]:
        """Take a device back from a user.

        The user's list is authoritative: the entry is removed even when the
        catalog device has since been deleted.

        Returns:
            The catalog device that was reset, or None for a dangling entry

        Raises:
            UserNotFoundError: No user is named `username`
            DeviceNotInUserListError: The user holds no such device
        """
        identifier = _as_identifier(device_identifier)
        user = self.get_user(username)
        index = user.find_device_index(identifier)
        if index is None:
            raise DeviceNotInUserListError(identifier, username)

        device = self.find_device(identifier)
        if device is not None:
            device.mark_available()
        del user.devices[index]
        return device

    def user_devices(self, username: str) -> list[UserDevice]:
        """Return the user's device list as recorded, possibly stale."""
        return list(self.get_user(username).devices)

    # ---------- catalog and users ----------

    def add_device(self, device: Device) -> Device:
        self.devices.append(device)
        return device

    def remove_device(self, identifier: Optional[str]) -> Device:
        """Delete the first device with `identifier`. User lists are not touched."""
        identifier = _as_identifier(identifier)
        for index, device in enumerate(self.devices):
            if device.identifier == identifier:
                return self.devices.pop(index)
        raise DeviceNotFoundError(identifier, message="Product not found")

    def add_user(self, user: User) -> User:
        if any(u.login == user.login for u in self.users):
            raise DuplicateLoginError(user.login)
        self.users.append(user)
        return user

    # ---------- serialization ----------

    def copy(self) -> "RegistryDocument":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "devices": [d.to_dict() for d in self.devices],
            "users": [u.to_dict() for u in self.users],
        }
        return _with_extra(data, self.extra)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistryDocument":
        return cls(
            devices=[Device.from_dict(d) for d in _records(data.get("devices"))],
            users=[User.from_dict(u) for u in _records(data.get("users"))],
            extra=_unknown_keys(data, cls.KEYS),
        )
