"""StorageBackend: protocol shared by the volatile and durable backends."""

from typing import List, Optional, Protocol, Union, runtime_checkable

from common.types import FragmentMetadata, FragmentSummary


@runtime_checkable
class StorageBackend(Protocol):
    """
    Persistence contract for fragment metadata and blob bytes.

    Every operation that takes an owner_id compares it with the stored owner
    and treats a mismatch exactly like a missing record.
    """

    async def read_metadata(self, owner_id: str, fragment_id: str) -> Optional[FragmentMetadata]:
        """Return metadata, or None if absent or owned by someone else."""
        ...

    async def write_metadata(self, metadata: FragmentMetadata, must_exist: bool = False) -> FragmentMetadata:
        """
        Upsert metadata keyed by fragment id and return the stored record.

        With must_exist, only replace an existing owned record, never insert.

        Raises:
            FragmentNotFoundError: If must_exist and no record exists
            OwnerMismatchError: If the id is stored under another owner
        """
        ...

    async def read_blob(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """Return payload bytes, or None if absent or owned by someone else."""
        ...

    async def write_blob(self, owner_id: str, fragment_id: str, data: bytes) -> FragmentMetadata:
        """
        Write payload bytes, then recompute and persist size.

        Raises:
            FragmentNotFoundError: If no metadata record exists yet
            OwnerMismatchError: If the stored owner differs from owner_id
        """
        ...

    async def list_by_owner(
        self,
        owner_id: str,
        expand: bool = False,
    ) -> Union[List[FragmentSummary], List[FragmentMetadata]]:
        """List id/created/updated projections, or full metadata when expand is True."""
        ...

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> bool:
        """Remove blob and metadata. Return False if absent or not owned."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the backend."""
        ...
