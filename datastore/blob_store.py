"""BlobStore: protocol for payload storage keyed by owner and fragment id."""

from typing import Optional, Protocol, runtime_checkable


def blob_key(owner_id: str, fragment_id: str) -> str:
    """
    Build the storage key of a payload.

    Args:
        owner_id: Owner of the fragment
        fragment_id: UUID of the fragment

    Returns:
        Key of the form "owner_id/fragment_id"
    """
    return f"{owner_id}/{fragment_id}"


@runtime_checkable
class BlobStore(Protocol):
    """
    Payload storage protocol.

    Implementations raise BackendFailureError on I/O failures and return
    None/False for absent keys.
    """

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Store bytes under owner_id/fragment_id, replacing previous content."""
        ...

    async def read(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """Return stored bytes, or None when the key does not exist."""
        ...

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """Delete stored bytes. Return True when something was removed."""
        ...

    async def aclose(self) -> None:
        """Release clients or connections; a no-op for local stores."""
        ...
