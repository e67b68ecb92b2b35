"""Fragment entity: one stored payload plus its metadata."""

from typing import Any, Collection, Dict, List, Optional

from common.constants import DEFAULT_EXTENSION, SUPPORTED_TYPES, TEXT_TYPES, TYPE_TO_EXTENSION
from common.exceptions import InvalidDataError, UnsupportedTypeError
from common.logging_config import get_logger
from common.types import FragmentMetadata
from common.utils import base_mime_type, get_current_timestamp, is_bytes_like
from converter import conversion_targets
from datastore.base import StorageBackend
from fragments.schemas import FragmentResponse

logger = get_logger(__name__)


class Fragment:
    """
    A fragment bound to the backend it is persisted in.

    `data` is a per-instance cache of the payload, never authoritative:
    None means "not loaded", and get_data() reads the backend on a miss.
    """

    def __init__(
        self,
        backend: StorageBackend,
        owner_id: str,
        fragment_id: str,
        type: str,
        size: int = 0,
        created: Optional[str] = None,
        updated: Optional[str] = None,
        data: Optional[bytes] = None,
        allowed_types: Optional[Collection[str]] = None,
    ):
        now = get_current_timestamp()
        self._backend = backend
        self._allowed_types = frozenset(allowed_types if allowed_types is not None else SUPPORTED_TYPES)
        self.id = fragment_id
        self.owner_id = owner_id
        self.type = type
        self.size = size
        self.created = created or now
        self.updated = updated or self.created
        self.data: Optional[bytes] = data
        self._persisted_size = 0

    @classmethod
    def from_metadata(
        cls,
        backend: StorageBackend,
        metadata: FragmentMetadata,
        allowed_types: Optional[Collection[str]] = None,
    ) -> "Fragment":
        fragment = cls(
            backend,
            owner_id=metadata.owner_id,
            fragment_id=metadata.id,
            type=metadata.type,
            size=metadata.size,
            created=metadata.created,
            updated=metadata.updated,
            allowed_types=allowed_types,
        )
        fragment._persisted_size = metadata.size
        return fragment

    @property
    def mime_type(self) -> str:
        """Type without parameters, e.g. 'text/html' for 'text/html; charset=utf-8'."""
        return base_mime_type(self.type)

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/") or self.mime_type in TEXT_TYPES

    @property
    def extension(self) -> str:
        return TYPE_TO_EXTENSION.get(self.mime_type, DEFAULT_EXTENSION)

    @property
    def formats(self) -> List[str]:
        """Types this fragment can be served as."""
        return conversion_targets(self.type)

    def metadata(self, size: Optional[int] = None) -> FragmentMetadata:
        return FragmentMetadata(
            id=self.id,
            owner_id=self.owner_id,
            type=self.type,
            size=self.size if size is None else size,
            created=self.created,
            updated=self.updated,
        )

    def _adopt(self, metadata: FragmentMetadata) -> None:
        self.type = metadata.type
        self.size = metadata.size
        self.created = metadata.created
        self.updated = metadata.updated
        self._persisted_size = metadata.size

    async def _persist(self, must_exist: bool = False) -> None:
        # Metadata keeps the last committed size until the blob write recomputes it.
        stored = await self._backend.write_metadata(self.metadata(size=self._persisted_size), must_exist=must_exist)
        self._persisted_size = stored.size

        if self.data:
            stored = await self._backend.write_blob(self.owner_id, self.id, self.data)
        self._adopt(stored)

    async def save(self) -> "Fragment":
        """
        Persist metadata, then the payload when there is one.

        Returns:
            This fragment, refreshed with the backend's stored metadata
        """
        logger.debug(f"Saving fragment [owner_id={self.owner_id}, id={self.id}]")
        await self._persist()
        logger.info(f"Fragment saved successfully [owner_id={self.owner_id}, id={self.id}, size={self.size}]")
        return self

    async def update(self, data: bytes, type: Optional[str] = None) -> "Fragment":
        """
        Replace type and payload of a saved fragment, then persist.

        Args:
            data: New payload
            type: New MIME type (defaults to the current one)

        Raises:
            InvalidDataError: If data is not a byte buffer, or is empty
            UnsupportedTypeError: If type is outside the allow-list
            FragmentNotFoundError: If the fragment was never saved, or has been deleted
        """
        if not is_bytes_like(data):
            raise InvalidDataError("Fragment data must be a byte buffer")
        if len(data) == 0:
            raise InvalidDataError("Fragment data cannot be empty")
        if type is not None and base_mime_type(type) not in self._allowed_types:
            raise UnsupportedTypeError(type)

        if type is not None:
            self.type = type
        self.data = bytes(data)
        self.size = len(self.data)
        self.updated = get_current_timestamp()

        await self._persist(must_exist=True)
        logger.info(f"Fragment updated [owner_id={self.owner_id}, id={self.id}, type={self.type}, size={self.size}]")
        return self

    async def get_data(self) -> Optional[bytes]:
        """
        Return the cached payload, loading and caching it on first access.
        """
        if self.data is not None:
            return self.data

        logger.debug(f"Loading fragment data [owner_id={self.owner_id}, id={self.id}]")
        self.data = await self._backend.read_blob(self.owner_id, self.id)
        return self.data

    def to_dict(self) -> Dict[str, Any]:
        """
        Metadata view of the fragment, without payload.
        """
        return self.metadata().to_dict()

    def to_json(self) -> Dict[str, Any]:
        """
        JSON-ready metadata view using the wire field names (ownerId).
        """
        return FragmentResponse(**self.to_dict()).model_dump(by_alias=True)

    def __repr__(self) -> str:
        return f"Fragment(id={self.id!r}, owner_id={self.owner_id!r}, type={self.type!r}, size={self.size})"
