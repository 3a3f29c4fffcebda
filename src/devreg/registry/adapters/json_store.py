"""JSON file adapter for the registry document.

The whole registry lives in one JSON object:

    {"devices": [...], "users": [...]}

A missing file reads as an empty registry. A file that cannot be parsed
also reads as empty, as does one whose "devices" or "users" is not a
list. Either is first moved aside to `<name>.corrupt` so the
next checkpoint cannot overwrite it. Writes go to a temporary sibling
which is then renamed over the document.
"""

import json
import logging
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os

from ...exceptions import StorageError
from ..domain.entities import RegistryDocument
from ..domain.ports import IDocumentStore

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(IDocumentStore):
    """IDocumentStore backed by a single JSON file."""

    def __init__(self, path: Union[str, Path], indent: int = 2):
        """Initialize the store.

        Args:
            path: Location of the JSON document
            indent: Indentation used when writing
        """
        self.path = Path(path)
        self.indent = indent

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    @property
    def _tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    async def load(self) -> RegistryDocument:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.warning(f"Registry file {self.path} not found, starting empty")
            return RegistryDocument()
        except OSError as e:
            raise StorageError(
                f"Failed to read registry file: {e}", path=str(self.path), cause=e
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            await self._quarantine(f"invalid JSON ({e})")
            return RegistryDocument()

        if not isinstance(data, dict):
            await self._quarantine(f"top-level value is {type(data).__name__}, not an object")
            return RegistryDocument()

        for key in RegistryDocument.KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, list):
                await self._quarantine(f'"{key}" is {type(value).__name__}, not a list')
                return RegistryDocument()

        document = RegistryDocument.from_dict(data)
        logger.info(
            f"Loaded registry from {self.path}: "
            f"{len(document.devices)} devices, {len(document.users)} users"
        )
        return document

    async def save(self, document: RegistryDocument) -> None:
        payload = json.dumps(document.to_dict(), indent=self.indent, ensure_ascii=False)
        tmp_path = self._tmp_path
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(
                f"Failed to write registry file: {e}", path=str(self.path), cause=e
            ) from e

        logger.debug(f"Checkpointed registry to {self.path} ({len(payload)} bytes)")

    async def _quarantine(self, reason: str) -> None:
        logger.error(
            f"Registry file {self.path} is unreadable ({reason}); "
            f"moving it to {self.corrupt_path} and starting empty"
        )
        try:
            await aiofiles.os.replace(self.path, self.corrupt_path)
        except OSError as e:
            raise StorageError(
                f"Failed to move unreadable registry file aside: {e}",
                path=str(self.path),
                cause=e,
            ) from e
