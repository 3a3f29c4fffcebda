"""Local directory adapter for device photos."""

import logging
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

import aiofiles
import aiofiles.os

from ...exceptions import InvalidRequestError, PhotoNotFoundError, StorageError
from ..domain.ports import IPhotoStore

logger = logging.getLogger(__name__)


def safe_filename(filename: str) -> str:
    """Strip any directory part a client put into an upload filename."""
    name = PureWindowsPath(PurePosixPath(filename).name).name
    if name in ("", ".", ".."):
        raise InvalidRequestError("Filename is required", field="photo")
    return name


class LocalPhotoStore(IPhotoStore):
    """IPhotoStore writing photos into one directory, keyed by filename.

    A new upload with the same filename replaces the stored photo.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    async def ensure_directory(self) -> None:
        try:
            await aiofiles.os.makedirs(self.directory, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create upload directory: {e}",
                path=str(self.directory),
                cause=e,
            ) from e

    async def save(self, filename: str, content: bytes) -> str:
        name = safe_filename(filename)
        await self.ensure_directory()
        target = self.directory / name
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to store photo: {e}", path=str(target), cause=e) from e

        logger.info(f"Stored photo {name} ({len(content):,} bytes)")
        return name

    async def delete(self, filename: str) -> None:
        target = self.directory / safe_filename(filename)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Failed to remove photo: {e}", path=str(target), cause=e) from e

        logger.info(f"Removed photo {target.name}")

    def resolve(self, filename: str) -> Path:
        if not filename:
            raise PhotoNotFoundError(filename)
        path = self.directory / safe_filename(filename)
        if not path.is_file():
            raise PhotoNotFoundError(filename)
        return path
