"""Fragment service: lifecycle operations over an injected storage backend."""

from typing import Iterable, List, Optional, Union

from common.constants import SUPPORTED_TYPES
from common.exceptions import InvalidDataError, UnsupportedTypeError
from common.logging_config import get_logger
from common.types import FragmentSummary
from common.utils import base_mime_type, generate_uuid, is_bytes_like
from datastore.base import StorageBackend
from fragments.fragment import Fragment

logger = get_logger(__name__)


class FragmentService:
    """
    Entry point used by request handlers.

    The backend is chosen once at startup and passed in; extra_types widens
    the MIME allow-list (e.g. image types accepted by a route layer).
    """

    def __init__(self, backend: StorageBackend, extra_types: Iterable[str] = ()):
        self.backend = backend
        self.allowed_types = frozenset(SUPPORTED_TYPES) | {base_mime_type(t) for t in extra_types}

    def is_supported_type(self, type_: str) -> bool:
        """
        Check a MIME type against the allow-list. Parameters after ';' are ignored.
        """
        is_supported = base_mime_type(type_) in self.allowed_types
        logger.debug(f"Checking content type [type={type_}, supported={is_supported}]")
        return is_supported

    def create(self, owner_id: str, type_: str, data: Optional[bytes] = None) -> Fragment:
        """
        Build a new, unsaved fragment.

        Args:
            owner_id: Authenticated owner
            type_: MIME type, parameters allowed
            data: Optional initial payload

        Returns:
            Fragment with a fresh id; nothing is persisted until save()

        Raises:
            UnsupportedTypeError: If type_ is outside the allow-list
            InvalidDataError: If data is given but is not a byte buffer
        """
        if not self.is_supported_type(type_):
            logger.warning(f"Unsupported content type [type={type_}]")
            raise UnsupportedTypeError(type_)
        if data is not None and not is_bytes_like(data):
            raise InvalidDataError("Fragment data must be a byte buffer")

        payload = bytes(data) if data is not None else None
        fragment = Fragment(
            self.backend,
            owner_id=owner_id,
            fragment_id=generate_uuid(),
            type=type_,
            size=len(payload) if payload is not None else 0,
            data=payload,
            allowed_types=self.allowed_types,
        )
        logger.debug(f"Fragment created [owner_id={owner_id}, id={fragment.id}, type={type_}, size={fragment.size}]")
        return fragment

    async def by_id(self, owner_id: str, fragment_id: str) -> Optional[Fragment]:
        """
        Load fragment metadata. The payload is not read.

        Returns:
            Fragment, or None if absent or owned by someone else
        """
        metadata = await self.backend.read_metadata(owner_id, fragment_id)
        if metadata is None:
            logger.debug(f"Fragment not found [owner_id={owner_id}, id={fragment_id}]")
            return None
        return Fragment.from_metadata(self.backend, metadata, allowed_types=self.allowed_types)

    async def by_id_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """
        Load fragment payload bytes.

        Returns:
            Payload, or None if absent or owned by someone else
        """
        data = await self.backend.read_blob(owner_id, fragment_id)
        if data is None:
            logger.debug(f"Fragment data not found [owner_id={owner_id}, id={fragment_id}]")
        return data

    async def by_user(
        self,
        owner_id: str,
        expand: bool = False,
    ) -> Union[List[FragmentSummary], List[Fragment]]:
        """
        List an owner's fragments.

        Without expand, return id/created/updated projections. With expand,
        return full fragments with payloads loaded one by one in listing
        order; a failed read aborts the whole listing.
        """
        items = await self.backend.list_by_owner(owner_id, expand)
        if not expand:
            logger.debug(f"Fragments listed [owner_id={owner_id}, count={len(items)}]")
            return items

        fragments = []
        for metadata in items:
            fragment = Fragment.from_metadata(self.backend, metadata, allowed_types=self.allowed_types)
            fragment.data = await self.backend.read_blob(owner_id, metadata.id)
            fragments.append(fragment)

        logger.debug(f"Fragments listed with data [owner_id={owner_id}, count={len(fragments)}]")
        return fragments

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        """
        Delete a fragment's payload and metadata.

        Returns:
            False if nothing was deleted
        """
        deleted = await self.backend.delete_fragment(owner_id, fragment_id)
        if deleted:
            logger.info(f"Fragment deleted successfully [owner_id={owner_id}, id={fragment_id}]")
        else:
            logger.warning(f"Fragment deletion found nothing [owner_id={owner_id}, id={fragment_id}]")
        return deleted

    async def aclose(self) -> None:
        """Release the backend's connections. Call once at shutdown."""
        await self.backend.aclose()
        logger.info("Fragment service closed")
