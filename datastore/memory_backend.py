"""Volatile storage backend over an injected MemoryDB."""

import asyncio
from typing import List, Optional, Union

from common.exceptions import FragmentNotFoundError, OwnerMismatchError
from common.logging_config import get_logger
from common.types import FragmentMetadata, FragmentSummary
from common.utils import get_current_timestamp
from datastore.memory_db import MemoryDB

logger = get_logger(__name__)

_DATA_KEY = "data"


def _to_metadata(record: dict) -> FragmentMetadata:
    return FragmentMetadata.from_mapping(record)


class MemoryBackend:
    """
    Storage backend keeping metadata and payload in one process-local store.

    The store is injected so independent backends never share state; all
    access is serialized through an asyncio lock.
    """

    def __init__(self, db: Optional[MemoryDB] = None):
        self.db = db if db is not None else MemoryDB()
        self._lock = asyncio.Lock()

    def _owned_record(self, owner_id: str, fragment_id: str) -> Optional[dict]:
        record = self.db.get(fragment_id)
        if record is None:
            logger.debug(f"Fragment not found in memory store [owner_id={owner_id}, id={fragment_id}]")
            return None
        if record["owner_id"] != owner_id:
            logger.warning(f"Fragment owner mismatch [owner_id={owner_id}, id={fragment_id}]")
            return None
        return record

    async def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentMetadata]:
        async with self._lock:
            record = self._owned_record(owner_id, fragment_id)
        if record is None:
            return None
        return _to_metadata(record)

    async def write_metadata(self, metadata: FragmentMetadata, must_exist: bool = False) -> FragmentMetadata:
        async with self._lock:
            existing = self.db.get(metadata.id)
            if existing is None and must_exist:
                logger.warning(f"Fragment not found, cannot update metadata [owner_id={metadata.owner_id}, id={metadata.id}]")
                raise FragmentNotFoundError(metadata.id)
            if existing is not None and existing["owner_id"] != metadata.owner_id:
                logger.warning(f"Fragment owner mismatch on metadata write [owner_id={metadata.owner_id}, id={metadata.id}]")
                raise OwnerMismatchError(metadata.id)

            record = metadata.to_dict()
            if existing is not None and _DATA_KEY in existing:
                record[_DATA_KEY] = existing[_DATA_KEY]
            self.db.set(metadata.id, record)

        logger.info(f"Fragment metadata written to memory store [owner_id={metadata.owner_id}, id={metadata.id}]")
        return metadata

    async def read_blob(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        async with self._lock:
            record = self._owned_record(owner_id, fragment_id)
        if record is None:
            return None

        data = record.get(_DATA_KEY)
        if data is None:
            logger.debug(f"Fragment has no data [owner_id={owner_id}, id={fragment_id}]")
        return data

    async def write_blob(self, owner_id: str, fragment_id: str, data: bytes) -> FragmentMetadata:
        async with self._lock:
            record = self.db.get(fragment_id)
            if record is None:
                logger.warning(f"Fragment not found, cannot write data [owner_id={owner_id}, id={fragment_id}]")
                raise FragmentNotFoundError(fragment_id)
            if record["owner_id"] != owner_id:
                logger.warning(f"Fragment owner mismatch on data write [owner_id={owner_id}, id={fragment_id}]")
                raise OwnerMismatchError(fragment_id)

            record[_DATA_KEY] = bytes(data)
            record["size"] = len(data)
            record["updated"] = get_current_timestamp()
            self.db.set(fragment_id, record)

        logger.info(f"Fragment data written to memory store [owner_id={owner_id}, id={fragment_id}, size={len(data)}]")
        return _to_metadata(record)

    async def list_by_owner(
        self,
        owner_id: str,
        expand: bool = False,
    ) -> Union[List[FragmentSummary], List[FragmentMetadata]]:
        async with self._lock:
            records = self.db.get_by_owner(owner_id)

        logger.debug(f"Fragments listed from memory store [owner_id={owner_id}, count={len(records)}, expand={expand}]")
        metadata = [_to_metadata(record) for record in records]
        if expand:
            return metadata
        return [item.summary() for item in metadata]

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> bool:
        async with self._lock:
            if self._owned_record(owner_id, fragment_id) is None:
                return False
            deleted = self.db.delete(fragment_id)

        if deleted:
            logger.info(f"Fragment deleted from memory store [owner_id={owner_id}, id={fragment_id}]")
        return deleted

    async def aclose(self) -> None:
        """Nothing to release; records stay in the injected store."""
