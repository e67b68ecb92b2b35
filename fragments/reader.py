"""Read-by-extension: serve a fragment's payload under a requested representation."""

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

from common.constants import UNKNOWN_MIME_TYPE
from common.exceptions import ConversionUnsupportedError, FragmentNotFoundError, UnsupportedTypeError
from common.logging_config import get_logger
from common.utils import base_mime_type
from converter import can_convert, convert, extension_to_mime_type
from fragments.service import FragmentService

logger = get_logger(__name__)


@dataclass(frozen=True)
class FragmentContent:
    """
    Payload ready to send, with the type it is encoded in.
    """
    data: bytes
    content_type: str
    converted: bool = False


def split_extension(path_id: str) -> Tuple[str, Optional[str]]:
    """
    Split "id.ext" into ("id", ".ext").

    A leading or trailing dot is not an extension.
    """
    dot = path_id.rfind('.')
    if 0 < dot < len(path_id) - 1:
        return path_id[:dot], path_id[dot:]
    return path_id, None


async def read_fragment_as(service: FragmentService, owner_id: str, path_id: str) -> FragmentContent:
    """
    Load a fragment's payload, converting it when path_id carries an extension.

    Args:
        service: Fragment service bound to the active backend
        owner_id: Authenticated owner
        path_id: Fragment id, optionally suffixed with an extension (e.g. "abc.html")

    Returns:
        FragmentContent with the (possibly converted) payload

    Raises:
        FragmentNotFoundError: If the fragment or its payload does not exist for this owner
        UnsupportedTypeError: If the extension is not recognized
        ConversionUnsupportedError: If the fragment cannot be served in the requested type
    """
    fragment_id, extension = split_extension(path_id)

    fragment = await service.by_id(owner_id, fragment_id)
    if fragment is None:
        raise FragmentNotFoundError(fragment_id)

    data = await fragment.get_data()
    if data is None:
        logger.warning(f"Fragment data not found [owner_id={owner_id}, id={fragment_id}]")
        raise FragmentNotFoundError(fragment_id)

    if extension is None:
        return FragmentContent(data=data, content_type=fragment.type)

    target_type = extension_to_mime_type(extension)
    if target_type == UNKNOWN_MIME_TYPE:
        logger.warning(f"Unknown file extension [owner_id={owner_id}, id={fragment_id}, extension={extension}]")
        raise UnsupportedTypeError(extension)

    if base_mime_type(fragment.type) == target_type:
        # Same representation: return the stored bytes untouched.
        return FragmentContent(data=data, content_type=fragment.type)

    if not can_convert(fragment.type, target_type):
        logger.warning(
            f"Unsupported type conversion [owner_id={owner_id}, id={fragment_id}, "
            f"from={fragment.type}, to={target_type}]"
        )
        raise ConversionUnsupportedError(fragment.type, target_type)

    # Pillow codecs block; run off the event loop.
    converted = await asyncio.to_thread(convert, data, fragment.type, target_type)
    logger.info(f"Fragment converted [owner_id={owner_id}, id={fragment_id}, from={fragment.type}, to={target_type}]")
    return FragmentContent(data=converted, content_type=target_type, converted=True)
