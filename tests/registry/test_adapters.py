"""Tests for the JSON document store and the local photo store."""

import json

import pytest

from devreg.exceptions import InvalidRequestError, PhotoNotFoundError, StorageError
from devreg.registry.adapters import JsonFileDocumentStore, LocalPhotoStore, safe_filename
from devreg.registry.domain.entities import Device, RegistryDocument, User
from devreg.registry.state import RegistryState


class TestJsonFileDocumentStore:
    """Tests for JsonFileDocumentStore."""

    @pytest.mark.asyncio
    async def test_missing_file_loads_empty(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path / "photos.json")

        document = await store.load()

        assert document == RegistryDocument()

    @pytest.mark.asyncio
    async def test_load_existing_document(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text(
            json.dumps(
                {
                    "devices": [
                        {"identifier": "D1", "name": "Laptop", "serialNumber": "SN1",
                         "usage": "is use", "user": "alice"}
                    ],
                    "users": [
                        {"name": "alice", "login": "alice",
                         "devices": [{"identifier": "D1", "usage": "is use"}]}
                    ],
                }
            ),
            encoding="utf-8",
        )

        document = await JsonFileDocumentStore(path).load()

        assert document.find_device("D1").serial_number == "SN1"
        assert document.user_devices("alice")[0].identifier == "D1"

    @pytest.mark.asyncio
    async def test_invalid_json_moved_aside(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileDocumentStore(path)

        document = await store.load()

        assert document == RegistryDocument()
        assert not path.exists()
        assert store.corrupt_path.read_text(encoding="utf-8") == "{not json"

    @pytest.mark.asyncio
    async def test_non_object_document_moved_aside(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        store = JsonFileDocumentStore(path)

        document = await store.load()

        assert document == RegistryDocument()
        assert store.corrupt_path.exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            '{"devices": 5, "users": []}',
            '{"devices": [], "users": {"alice": {}}}',
            '{"devices": "D1"}',
        ],
    )
    async def test_non_list_collection_moved_aside(self, tmp_path, content):
        path = tmp_path / "photos.json"
        path.write_text(content, encoding="utf-8")
        store = JsonFileDocumentStore(path)

        document = await store.load()

        assert document == RegistryDocument()
        assert store.corrupt_path.read_text(encoding="utf-8") == content

    @pytest.mark.asyncio
    async def test_unknown_keys_survive_checkpoint(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text(
            json.dumps(
                {
                    "devices": [{"identifier": "D1", "name": "Laptop", "location": "lab"}],
                    "users": [
                        {"name": "alice", "login": "alice", "email": "alice@example.com",
                         "devices": []}
                    ],
                    "meta": {"v": 1},
                }
            ),
            encoding="utf-8",
        )
        store = JsonFileDocumentStore(path)
        state = RegistryState(store)
        await state.load()

        async with state.transaction() as doc:
            doc.assign("D1", "alice")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["meta"] == {"v": 1}
        assert data["devices"][0]["location"] == "lab"
        assert data["devices"][0]["user"] == "alice"
        assert data["users"][0]["email"] == "alice@example.com"
        assert data["users"][0]["devices"] == [{"identifier": "D1", "usage": "is use"}]

    @pytest.mark.asyncio
    async def test_save_writes_indented_json(self, tmp_path):
        path = tmp_path / "photos.json"
        store = JsonFileDocumentStore(path)
        document = RegistryDocument(
            devices=[Device(identifier="D1", filename="d1.jpg")],
            users=[User(name="alice", login="alice")],
        )

        await store.save(document)

        text = path.read_text(encoding="utf-8")
        assert text.startswith('{\n  "devices": [')
        assert json.loads(text) == document.to_dict()
        assert not (tmp_path / "photos.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path / "nested" / "photos.json")
        document = RegistryDocument(
            devices=[Device(identifier="D1")],
            users=[User(name="alice", login="alice")],
        )
        document.assign("D1", "alice")

        await store.save(document)
        loaded = await store.load()

        assert loaded == document

    @pytest.mark.asyncio
    async def test_unreadable_path_raises_storage_error(self, tmp_path):
        # A directory where the file should be cannot be opened for reading
        path = tmp_path / "photos.json"
        path.mkdir()

        with pytest.raises(StorageError) as exc_info:
            await JsonFileDocumentStore(path).load()

        assert exc_info.value.status_code == 500
        assert exc_info.value.details["path"] == str(path)


class TestLocalPhotoStore:
    """Tests for LocalPhotoStore."""

    @pytest.mark.asyncio
    async def test_save_and_resolve(self, tmp_path):
        store = LocalPhotoStore(tmp_path / "uploads")

        name = await store.save("camera.jpg", b"\xff\xd8jpeg")

        assert name == "camera.jpg"
        path = store.resolve("camera.jpg")
        assert path.read_bytes() == b"\xff\xd8jpeg"

    @pytest.mark.asyncio
    async def test_same_filename_overwrites(self, tmp_path):
        store = LocalPhotoStore(tmp_path)

        await store.save("a.png", b"first")
        await store.save("a.png", b"second")

        assert store.resolve("a.png").read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_directory_parts_are_stripped(self, tmp_path):
        store = LocalPhotoStore(tmp_path / "uploads")

        name = await store.save("../../etc/evil.jpg", b"x")

        assert name == "evil.jpg"
        assert (tmp_path / "uploads" / "evil.jpg").exists()

    def test_resolve_missing_photo(self, tmp_path):
        store = LocalPhotoStore(tmp_path)
        with pytest.raises(PhotoNotFoundError):
            store.resolve("nope.jpg")

    def test_resolve_without_filename(self, tmp_path):
        store = LocalPhotoStore(tmp_path)
        with pytest.raises(PhotoNotFoundError):
            store.resolve(None)

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        store = LocalPhotoStore(tmp_path)
        await store.save("a.png", b"x")

        await store.delete("a.png")

        assert not (tmp_path / "a.png").exists()

    @pytest.mark.asyncio
    async def test_delete_missing_photo(self, tmp_path):
        await LocalPhotoStore(tmp_path).delete("nope.png")


class TestSafeFilename:
    """Tests for safe_filename."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("photo.jpg", "photo.jpg"),
            ("dir/photo.jpg", "photo.jpg"),
            ("C:\\Users\\me\\photo.jpg", "photo.jpg"),
        ],
    )
    def test_strips_directories(self, raw, expected):
        assert safe_filename(raw) == expected

    @pytest.mark.parametrize("raw", ["", ".", ".."])
    def test_rejects_empty_names(self, raw):
        with pytest.raises(InvalidRequestError):
            safe_filename(raw)
