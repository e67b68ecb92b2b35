"""Conversion engine for text-family and image-family fragment payloads."""

from typing import List, Tuple

from common.constants import IMAGE_TYPES, TEXT_TYPES
from common.exceptions import ConversionUnsupportedError
from common.logging_config import get_logger
from common.utils import base_mime_type
from converter.image import convert_image
from converter.mime import IMAGE_FAMILY, TEXT_FAMILY, can_convert, extension_to_mime_type, family_of
from converter.text import TEXT_CONVERSIONS, convert_text

logger = get_logger(__name__)


def supported_conversions() -> List[Tuple[str, str]]:
    """
    Enumerate every implemented (from, to) pair, identity pairs excluded.
    """
    pairs = list(TEXT_CONVERSIONS)
    pairs.extend(
        (source, target)
        for source in sorted(IMAGE_TYPES)
        for target in sorted(IMAGE_TYPES)
        if source != target
    )
    return pairs


def conversion_targets(type_: str) -> List[str]:
    """
    List the types a payload of the given type can be converted to, itself included.
    """
    source = base_mime_type(type_)
    if source in IMAGE_TYPES:
        return sorted(IMAGE_TYPES)
    if source in TEXT_TYPES:
        return sorted({source} | {target for (origin, target) in TEXT_CONVERSIONS if origin == source})
    return [source]


def convert(data: bytes, from_type: str, to_type: str) -> bytes:
    """
    Convert payload bytes from one MIME type to another.

    Args:
        data: Source payload
        from_type: Declared type of the payload
        to_type: Requested type

    Returns:
        Converted payload

    Raises:
        ConversionUnsupportedError: If the families differ, or no encoder exists for the target
    """
    logger.debug(f"Converting fragment data [from={from_type}, to={to_type}, size={len(data)}]")

    if not can_convert(from_type, to_type):
        raise ConversionUnsupportedError(from_type, to_type)

    if base_mime_type(from_type) == base_mime_type(to_type):
        return data

    family = family_of(from_type)
    if family == TEXT_FAMILY:
        return convert_text(data, from_type, to_type)
    if family == IMAGE_FAMILY:
        return convert_image(data, from_type, to_type)

    raise ConversionUnsupportedError(from_type, to_type)


__all__ = [
    "can_convert",
    "convert",
    "conversion_targets",
    "extension_to_mime_type",
    "family_of",
    "supported_conversions",
]
