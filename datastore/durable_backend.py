"""Durable storage backend: SQLite metadata index plus a separate blob store."""

import asyncio
import sqlite3
from typing import List, Optional, Union

from common.exceptions import BackendFailureError, FragmentNotFoundError, OwnerMismatchError
from common.logging_config import get_logger
from common.types import FragmentMetadata, FragmentSummary
from common.utils import get_current_timestamp
from datastore.blob_store import BlobStore, blob_key
from datastore.database import init_database
from datastore.repositories.fragment_repository import FragmentRepository

logger = get_logger(__name__)


class DurableBackend:
    """
    Storage backend over two independently failing stores.

    Writes go metadata first, then blob, then the recomputed size.
    Deletes go blob first, then metadata; a failed blob delete is recorded
    in orphaned_blobs and retried by reconcile_orphans().
    """

    def __init__(self, repository: FragmentRepository, blob_store: BlobStore):
        self.repository = repository
        self.blob_store = blob_store

    @classmethod
    def open(cls, db_path: str, blob_store: BlobStore) -> "DurableBackend":
        """
        Initialize the metadata index at db_path and build a backend.
        """
        init_database(db_path)
        return cls(FragmentRepository(db_path), blob_store)

    async def _index(self, operation, *args):
        """Run a blocking metadata index call off the event loop."""
        try:
            return await asyncio.to_thread(operation, *args)
        except sqlite3.Error as e:
            logger.error(f"Metadata index failure in {operation.__name__}: {e}", exc_info=True)
            raise BackendFailureError(f"metadata index failure: {e}") from e

    async def _missing(self, owner_id: str, fragment_id: str, action: str) -> FragmentNotFoundError:
        """Build the error for an absent owned record, telling a foreign owner apart in the log."""
        stored_owner = await self._index(self.repository.get_owner, fragment_id)
        if stored_owner is not None:
            logger.warning(f"Fragment owner mismatch on {action} [owner_id={owner_id}, id={fragment_id}]")
            return OwnerMismatchError(fragment_id)
        logger.warning(f"Fragment not found, cannot {action} [owner_id={owner_id}, id={fragment_id}]")
        return FragmentNotFoundError(fragment_id)

    async def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentMetadata]:
        metadata = await self._index(self.repository.get, owner_id, fragment_id)
        if metadata is not None:
            return metadata

        stored_owner = await self._index(self.repository.get_owner, fragment_id)
        if stored_owner is not None:
            logger.warning(f"Fragment owner mismatch [owner_id={owner_id}, id={fragment_id}]")
        else:
            logger.debug(f"Fragment not found in metadata index [owner_id={owner_id}, id={fragment_id}]")
        return None

    async def write_metadata(self, metadata: FragmentMetadata, must_exist: bool = False) -> FragmentMetadata:
        if must_exist:
            if not await self._index(self.repository.update, metadata):
                raise await self._missing(metadata.owner_id, metadata.id, "update metadata")
        else:
            await self._index(self.repository.upsert, metadata)

        logger.info(f"Fragment written to metadata index [owner_id={metadata.owner_id}, id={metadata.id}]")
        return metadata

    async def read_blob(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        # Keys are already scoped by owner, but a blob outliving its metadata must stay invisible.
        metadata = await self.read_metadata(owner_id, fragment_id)
        if metadata is None:
            return None
        data = await self.blob_store.read(owner_id, fragment_id)
        if data is None:
            logger.debug(f"Fragment data not found in blob store [owner_id={owner_id}, id={fragment_id}]")
        return data

    async def write_blob(self, owner_id: str, fragment_id: str, data: bytes) -> FragmentMetadata:
        metadata = await self._index(self.repository.get, owner_id, fragment_id)
        if metadata is None:
            raise await self._missing(owner_id, fragment_id, "write data")

        logger.info(f"Writing fragment data [key={blob_key(owner_id, fragment_id)}, size={len(data)}]")
        await self.blob_store.write(owner_id, fragment_id, data)

        updated = await self._index(
            self.repository.update_size,
            owner_id,
            fragment_id,
            len(data),
            get_current_timestamp(),
        )
        if updated is None:
            # Deleted between the blob write and the size update.
            logger.warning(f"Fragment metadata vanished after data upload [owner_id={owner_id}, id={fragment_id}]")
            raise FragmentNotFoundError(fragment_id)

        logger.info(f"Fragment data written [owner_id={owner_id}, id={fragment_id}, size={len(data)}]")
        return updated

    async def list_by_owner(
        self,
        owner_id: str,
        expand: bool = False,
    ) -> Union[List[FragmentSummary], List[FragmentMetadata]]:
        if expand:
            items = await self._index(self.repository.list_metadata, owner_id)
        else:
            items = await self._index(self.repository.list_summaries, owner_id)
        logger.debug(f"Fragments listed from metadata index [owner_id={owner_id}, count={len(items)}, expand={expand}]")
        return items

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> bool:
        logger.debug(f"Deleting fragment [owner_id={owner_id}, id={fragment_id}]")

        metadata = await self.read_metadata(owner_id, fragment_id)
        if metadata is None:
            return False

        try:
            await self.blob_store.delete(owner_id, fragment_id)
        except BackendFailureError as e:
            logger.error(f"Error deleting fragment data, metadata removal continues [owner_id={owner_id}, id={fragment_id}]: {e}")
            await self._record_orphan(owner_id, fragment_id, e)

        deleted = await self._index(self.repository.delete, owner_id, fragment_id)
        if deleted:
            logger.info(f"Fragment deleted [owner_id={owner_id}, id={fragment_id}]")
        return deleted

    async def _record_orphan(self, owner_id: str, fragment_id: str, error: Exception) -> None:
        try:
            await self._index(self.repository.mark_orphaned_blob, owner_id, fragment_id, str(error))
        except BackendFailureError as e:
            logger.error(f"Could not record orphaned blob [key={blob_key(owner_id, fragment_id)}]: {e}")

    async def reconcile_orphans(self) -> List[str]:
        """
        Retry deletion of blobs whose earlier delete failed.

        Returns:
            Keys ("owner_id/fragment_id") that are still pending
        """
        orphans = await self._index(self.repository.list_orphaned_blobs)
        pending = []

        for orphan in orphans:
            owner_id, fragment_id = orphan["owner_id"], orphan["id"]
            if await self._index(self.repository.get, owner_id, fragment_id) is not None:
                # Fragment id was written again since; its blob is live.
                await self._index(self.repository.clear_orphaned_blob, owner_id, fragment_id)
                continue
            try:
                await self.blob_store.delete(owner_id, fragment_id)
            except BackendFailureError as e:
                logger.warning(f"Orphaned blob still not deletable [key={blob_key(owner_id, fragment_id)}]: {e}")
                await self._index(self.repository.mark_orphaned_blob, owner_id, fragment_id, str(e))
                pending.append(blob_key(owner_id, fragment_id))
                continue
            await self._index(self.repository.clear_orphaned_blob, owner_id, fragment_id)
            logger.info(f"Reconciled orphaned blob [key={blob_key(owner_id, fragment_id)}]")

        if orphans:
            logger.info(f"Orphan reconciliation finished [examined={len(orphans)}, pending={len(pending)}]")
        return pending

    async def aclose(self) -> None:
        """Close the blob store client. The metadata index opens a connection per call."""
        await self.blob_store.aclose()
