"""Manages fragment payload files on disk under owner directories."""

import asyncio
from pathlib import Path
from typing import Optional

from common.constants import BLOB_SUFFIX
from common.exceptions import BackendFailureError
from common.logging_config import get_logger
from datastore.blob_store import blob_key

logger = get_logger(__name__)


class FileBlobStore:
    """
    Filesystem blob store. Each payload lives at <root>/<owner_id>/<fragment_id>.blob.
    """

    def __init__(self, root: str):
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def get_blob_path(self, owner_id: str, fragment_id: str) -> Path:
        """
        Get file path for a payload.

        Args:
            owner_id: Owner of the fragment
            fragment_id: UUID of the fragment

        Returns:
            Path object for the payload file

        Raises:
            BackendFailureError: If the key resolves outside the store root
        """
        root = self._root.resolve()
        candidate = (self._root / f"{blob_key(owner_id, fragment_id)}{BLOB_SUFFIX}").resolve()
        try:
            candidate.relative_to(root)
        except ValueError:
            raise BackendFailureError(f"Blob key {blob_key(owner_id, fragment_id)!r} resolves outside store root")
        return candidate

    def _write_sync(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)

    def _read_sync(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _delete_sync(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """
        Write payload data to disk, replacing any previous file.

        Raises:
            BackendFailureError: If the write operation fails
        """
        path = self.get_blob_path(owner_id, fragment_id)
        try:
            await asyncio.to_thread(self._write_sync, path, data)
        except OSError as e:
            logger.error(f"Failed to write blob [owner_id={owner_id}, id={fragment_id}]: {e}")
            raise BackendFailureError(f"unable to write fragment data: {e}") from e
        logger.debug(f"Wrote blob [owner_id={owner_id}, id={fragment_id}, size={len(data)}]")

    async def read(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """
        Read entire payload from disk.

        Returns:
            Raw payload, or None if the file does not exist

        Raises:
            BackendFailureError: If the read operation fails
        """
        path = self.get_blob_path(owner_id, fragment_id)
        try:
            return await asyncio.to_thread(self._read_sync, path)
        except OSError as e:
            logger.error(f"Failed to read blob [owner_id={owner_id}, id={fragment_id}]: {e}")
            raise BackendFailureError(f"unable to read fragment data: {e}") from e

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """
        Delete payload file from disk.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        path = self.get_blob_path(owner_id, fragment_id)
        try:
            return await asyncio.to_thread(self._delete_sync, path)
        except OSError as e:
            logger.error(f"Failed to delete blob [owner_id={owner_id}, id={fragment_id}]: {e}")
            raise BackendFailureError(f"unable to delete fragment data: {e}") from e

    async def aclose(self) -> None:
        """Nothing to release; every call opens and closes its own file."""
