"""Fragment metadata repository for database operations."""

from datetime import datetime, timezone
from typing import List, Optional

from common.exceptions import OwnerMismatchError
from common.logging_config import get_logger
from common.types import FragmentMetadata, FragmentSummary
from datastore.database import get_db_connection, get_row_value, row_to_dict

logger = get_logger(__name__)


def _row_to_metadata(row) -> FragmentMetadata:
    return FragmentMetadata(
        id=row["id"],
        owner_id=row["owner_id"],
        type=row["type"],
        size=row["size"],
        created=row["created"],
        updated=row["updated"],
    )


class FragmentRepository:
    """
    Blocking SQLite access for the metadata index. Callers run these
    methods off the event loop.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def get(self, owner_id: str, fragment_id: str) -> Optional[FragmentMetadata]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, owner_id, type, size, created, updated FROM fragments WHERE owner_id = ? AND id = ?",
                (owner_id, fragment_id)
            )
            row = cursor.fetchone()

            if row is None:
                return None
            return _row_to_metadata(row)

    def upsert(self, metadata: FragmentMetadata) -> FragmentMetadata:
        """
        Insert or replace metadata keyed by id.

        Raises:
            OwnerMismatchError: If the id already exists under another owner
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO fragments (id, owner_id, type, size, created, updated)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    type = excluded.type,
                    size = excluded.size,
                    updated = excluded.updated
                WHERE fragments.owner_id = excluded.owner_id
                """,
                (
                    metadata.id,
                    metadata.owner_id,
                    metadata.type,
                    metadata.size,
                    metadata.created,
                    metadata.updated,
                )
            )
            if cursor.rowcount == 0:
                conn.rollback()
                logger.warning(f"Fragment owner mismatch on metadata write [owner_id={metadata.owner_id}, id={metadata.id}]")
                raise OwnerMismatchError(metadata.id)

            conn.commit()

        logger.debug(f"Fragment metadata upserted [owner_id={metadata.owner_id}, id={metadata.id}]")
        return metadata

    def update(self, metadata: FragmentMetadata) -> bool:
        """
        Replace type, size and updated of an owned record. Never inserts.

        Returns:
            False if no record exists for (owner_id, id)
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE fragments SET type = ?, size = ?, updated = ? WHERE owner_id = ? AND id = ?",
                (metadata.type, metadata.size, metadata.updated, metadata.owner_id, metadata.id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def update_size(self, owner_id: str, fragment_id: str, size: int, updated: str) -> Optional[FragmentMetadata]:
        """
        Persist a recomputed size for an owned fragment.

        Returns:
            Updated metadata, or None if the owned record no longer exists
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE fragments SET size = ?, updated = ? WHERE owner_id = ? AND id = ?",
                (size, updated, owner_id, fragment_id)
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None

        return self.get(owner_id, fragment_id)

    def get_owner(self, fragment_id: str) -> Optional[str]:
        """
        Look up the stored owner of an id, regardless of caller.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT owner_id FROM fragments WHERE id = ?", (fragment_id,))
            row = cursor.fetchone()
            return None if row is None else row["owner_id"]

    def list_summaries(self, owner_id: str) -> List[FragmentSummary]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, created, updated FROM fragments WHERE owner_id = ? ORDER BY created, id",
                (owner_id,)
            )
            return [
                FragmentSummary(id=row["id"], created=row["created"], updated=row["updated"])
                for row in cursor.fetchall()
            ]

    def list_metadata(self, owner_id: str) -> List[FragmentMetadata]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, owner_id, type, size, created, updated
                FROM fragments WHERE owner_id = ? ORDER BY created, id
                """,
                (owner_id,)
            )
            return [_row_to_metadata(row) for row in cursor.fetchall()]

    def delete(self, owner_id: str, fragment_id: str) -> bool:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM fragments WHERE owner_id = ? AND id = ?",
                (owner_id, fragment_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def mark_orphaned_blob(self, owner_id: str, fragment_id: str, error: str) -> None:
        """
        Record a blob whose deletion failed so it can be reconciled later.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO orphaned_blobs (owner_id, id, recorded_at, last_error)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(owner_id, id) DO UPDATE SET
                    last_error = excluded.last_error
                """,
                (owner_id, fragment_id, datetime.now(timezone.utc).isoformat(), error)
            )
            conn.commit()

        logger.info(f"Marked blob for reconciliation [owner_id={owner_id}, id={fragment_id}]")

    def list_orphaned_blobs(self) -> List[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT owner_id, id, recorded_at, last_error FROM orphaned_blobs ORDER BY recorded_at")
            rows = cursor.fetchall()
            return [
                {**row_to_dict(row), "last_error": get_row_value(row, "last_error", "")}
                for row in rows
            ]

    def clear_orphaned_blob(self, owner_id: str, fragment_id: str) -> None:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM orphaned_blobs WHERE owner_id = ? AND id = ?",
                (owner_id, fragment_id)
            )
            conn.commit()
