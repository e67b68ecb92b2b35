"""In-memory keyed store: fragment_id -> record (metadata fields plus optional data)."""

from typing import Any, Dict, List, Optional

from common.logging_config import get_logger

logger = get_logger(__name__)


class MemoryDB:
    """
    Keyed map of fragment records for development and testing.
    Records are copied in and out so callers never hold a live reference.
    """

    def __init__(self):
        """Initialize empty store."""
        self._db: Dict[str, Dict[str, Any]] = {}
        logger.debug("MemoryDB initialized")

    def get(self, fragment_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a record by ID.

        Args:
            fragment_id: UUID of the fragment

        Returns:
            Copy of the record, or None if not found
        """
        record = self._db.get(fragment_id)
        return dict(record) if record is not None else None

    def set(self, fragment_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Store a record by ID, replacing any previous one.

        Args:
            fragment_id: UUID of the fragment
            record: Record fields

        Returns:
            Copy of the stored record
        """
        self._db[fragment_id] = dict(record)
        return dict(record)

    def delete(self, fragment_id: str) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        return self._db.pop(fragment_id, None) is not None

    def get_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """
        Get all records for one owner, in insertion order.
        """
        return [dict(record) for record in self._db.values() if record.get("owner_id") == owner_id]

    def has(self, fragment_id: str) -> bool:
        return fragment_id in self._db

    def get_all(self) -> List[Dict[str, Any]]:
        return [dict(record) for record in self._db.values()]

    def clear(self) -> None:
        logger.debug("MemoryDB cleared")
        self._db.clear()

    def size(self) -> int:
        """
        Get number of records in the store.
        """
        return len(self._db)
