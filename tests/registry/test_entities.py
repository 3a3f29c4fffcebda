"""Tests for registry domain entities and assignment rules."""

import pytest

from devreg.exceptions import (
    DeviceAlreadyAssignedError,
    DeviceNotFoundError,
    DeviceNotInUserListError,
    DuplicateLoginError,
    UserNotFoundError,
)
from devreg.registry.domain.entities import (
    AVAILABLE,
    Device,
    DeviceUsage,
    RegistryDocument,
    User,
    UserDevice,
)


@pytest.fixture
def document():
    return RegistryDocument(
        devices=[
            Device(identifier="D1", name="Laptop", serial_number="SN-1"),
            Device(identifier="D2", name="Phone"),
        ],
        users=[
            User(name="alice", surname="Smith", login="asmith", password="pw"),
            User(name="bob", login="bob"),
        ],
    )


class TestDevice:
    """Tests for Device entity."""

    def test_defaults_to_available(self):
        device = Device(identifier="D1")
        assert device.usage == "no used"
        assert device.user == AVAILABLE
        assert device.is_in_use is False

    def test_identifier_normalized_to_string(self):
        assert Device(identifier=42).identifier == "42"

    def test_usage_enum_stored_as_value(self):
        device = Device(identifier="D1", usage=DeviceUsage.IN_USE)
        assert device.usage == "is use"
        assert device.is_in_use is True

    def test_from_dict_uses_camel_case_keys(self):
        device = Device.from_dict(
            {
                "identifier": "D9",
                "name": "Camera",
                "serialNumber": "XYZ",
                "manufacturer": "Acme",
                "filename": "cam.jpg",
                "usage": "is use",
                "user": "alice",
            }
        )
        assert device.serial_number == "XYZ"
        assert device.filename == "cam.jpg"
        assert device.user == "alice"
        assert device.to_dict()["serialNumber"] == "XYZ"

    def test_from_dict_fills_missing_state(self):
        device = Device.from_dict({"identifier": "D9"})
        assert device.usage == "no used"
        assert device.user == AVAILABLE
        assert device.name is None

    def test_info_hides_internal_fields(self):
        info = Device(identifier="D1", filename="a.jpg", usage="is use", user="x").info()
        assert set(info) == {"identifier", "name", "description", "serialNumber", "manufacturer"}

    def test_apply_update_only_touches_given_fields(self):
        device = Device(identifier="D1", name="Old", description="Desc", manufacturer="M")
        written = device.apply_update({"name": "New", "description": None})
        assert written == ["name", "description"]
        assert device.name == "New"
        assert device.description is None
        assert device.manufacturer == "M"

    def test_apply_update_rejects_state_fields(self):
        device = Device(identifier="D1")
        with pytest.raises(ValueError):
            device.apply_update({"usage": "is use"})


class TestAssign:
    """Tests for RegistryDocument.assign."""

    def test_assign_free_device(self, document):
        entry = document.assign("D1", "alice")

        device = document.find_device("D1")
        assert device.usage == "is use"
        assert device.user == "alice"
        assert entry == UserDevice(identifier="D1", usage="is use")
        assert document.user_devices("alice") == [UserDevice("D1", "is use")]

    def test_assign_unknown_user(self, document):
        before = document.to_dict()
        with pytest.raises(UserNotFoundError):
            document.assign("D1", "carol")
        assert document.to_dict() == before

    def test_assign_unknown_device(self, document):
        before = document.to_dict()
        with pytest.raises(DeviceNotFoundError):
            document.assign("D404", "alice")
        assert document.to_dict() == before

    def test_user_checked_before_device(self, document):
        with pytest.raises(UserNotFoundError):
            document.assign("D404", "carol")

    def test_assign_to_other_user_conflicts(self, document):
        document.assign("D1", "alice")
        before = document.to_dict()

        with pytest.raises(DeviceAlreadyAssignedError) as exc_info:
            document.assign("D1", "bob")

        assert exc_info.value.holder == "alice"
        assert document.to_dict() == before

    def test_reassign_to_same_user_conflicts(self, document):
        document.assign("D1", "alice")
        with pytest.raises(DeviceAlreadyAssignedError):
            document.assign("D1", "alice")
        assert len(document.user_devices("alice")) == 1

    def test_user_holds_several_devices_in_order(self, document):
        document.assign("D2", "alice")
        document.assign("D1", "alice")
        assert [d.identifier for d in document.user_devices("alice")] == ["D2", "D1"]


class TestRelease:
    """Tests for RegistryDocument.release."""

    def test_release_resets_device(self, document):
        document.assign("D1", "alice")

        device = document.release("D1", "alice")

        assert device is document.find_device("D1")
        assert device.usage == "no used"
        assert device.user == AVAILABLE
        assert document.user_devices("alice") == []

    def test_release_unknown_user(self, document):
        with pytest.raises(UserNotFoundError):
            document.release("D1", "carol")

    def test_release_device_not_held(self, document):
        document.assign("D1", "alice")
        before = document.to_dict()

        with pytest.raises(DeviceNotInUserListError):
            document.release("D1", "bob")

        assert document.to_dict() == before

    def test_release_dangling_entry(self, document):
        document.assign("D1", "alice")
        document.remove_device("D1")

        device = document.release("D1", "alice")

        assert device is None
        assert document.user_devices("alice") == []

    def test_release_matches_identifier_as_string(self, document):
        document.users[0].devices.append(UserDevice(identifier=7))
        document.release(7, "alice")
        assert document.user_devices("alice") == []

    def test_release_removes_first_match_only(self, document):
        alice = document.find_user("alice")
        alice.devices = [UserDevice("D1"), UserDevice("D2"), UserDevice("D1")]

        document.release("D1", "alice")

        assert [d.identifier for d in alice.devices] == ["D2", "D1"]


class TestUserDevices:
    """Tests for RegistryDocument.user_devices."""

    def test_unknown_user(self, document):
        with pytest.raises(UserNotFoundError):
            document.user_devices("carol")

    def test_entries_are_verbatim(self, document):
        document.assign("D1", "alice")
        # Out-of-band change to the catalog is not reflected in the user's list
        document.find_device("D1").mark_available()
        assert document.user_devices("alice") == [UserDevice("D1", "is use")]


class TestCatalogAndUsers:
    """Tests for catalog and user mutations."""

    def test_remove_device_keeps_user_entries(self, document):
        document.assign("D1", "alice")

        removed = document.remove_device("D1")

        assert removed.identifier == "D1"
        assert document.find_device("D1") is None
        assert document.user_devices("alice") == [UserDevice("D1", "is use")]

    def test_remove_first_duplicate(self):
        document = RegistryDocument(
            devices=[Device("D1", name="first"), Device("D1", name="second")]
        )
        document.remove_device("D1")
        assert [d.name for d in document.devices] == ["second"]

    def test_remove_unknown_device(self, document):
        with pytest.raises(DeviceNotFoundError) as exc_info:
            document.remove_device("D404")
        assert exc_info.value.message == "Product not found"

    def test_find_device_first_match_wins(self):
        document = RegistryDocument(
            devices=[Device("D1", name="first"), Device("D1", name="second")]
        )
        assert document.find_device("D1").name == "first"

    def test_add_user_duplicate_login(self, document):
        with pytest.raises(DuplicateLoginError):
            document.add_user(User(name="alice2", login="asmith"))
        assert len(document.users) == 2

    def test_add_user(self, document):
        document.add_user(User(name="carol", login="carol"))
        assert document.find_user("carol").devices == []


class TestSerialization:
    """Tests for document (de)serialization."""

    def test_round_trip_preserves_layout(self, document):
        document.assign("D1", "alice")
        data = document.to_dict()

        assert data["users"][0] == {
            "name": "alice",
            "surname": "Smith",
            "login": "asmith",
            "password": "pw",
            "devices": [{"identifier": "D1", "usage": "is use"}],
        }
        assert RegistryDocument.from_dict(data) == document

    def test_from_dict_tolerates_missing_collections(self):
        document = RegistryDocument.from_dict({})
        assert document.devices == []
        assert document.users == []

    def test_from_dict_skips_non_object_entries(self):
        document = RegistryDocument.from_dict({"devices": [{"identifier": "D1"}, "junk"]})
        assert len(document.devices) == 1

    def test_unknown_keys_round_trip(self):
        data = {
            "devices": [{"identifier": "D1", "location": "lab"}],
            "users": [
                {
                    "name": "alice",
                    "email": "a@example.com",
                    "devices": [{"identifier": "D1", "usage": "is use", "since": "2024-01-01"}],
                }
            ],
            "meta": {"v": 1},
        }

        out = RegistryDocument.from_dict(data).to_dict()

        assert out["meta"] == {"v": 1}
        assert out["devices"][0]["location"] == "lab"
        assert out["users"][0]["email"] == "a@example.com"
        assert out["users"][0]["devices"][0]["since"] == "2024-01-01"

    def test_modelled_fields_win_over_extra(self):
        device = Device(identifier="D1", extra={"usage": "stale", "location": "lab"})
        data = device.to_dict()
        assert data["usage"] == "no used"
        assert data["location"] == "lab"
        assert "location" not in device.info()

    def test_non_list_collections_read_as_empty(self):
        document = RegistryDocument.from_dict({"devices": 5, "users": [{"name": "a", "devices": 3}]})
        assert document.devices == []
        assert document.users[0].devices == []

    def test_copy_is_deep(self, document):
        clone = document.copy()
        clone.assign("D1", "alice")
        assert document.find_device("D1").usage == "no used"
        assert document.user_devices("alice") == []
