"""MIME families, extension lookup and the family-level conversion check."""

from typing import Optional

from common.constants import EXTENSION_TO_TYPE, IMAGE_TYPES, TEXT_TYPES, UNKNOWN_MIME_TYPE
from common.utils import base_mime_type

TEXT_FAMILY = "text"
IMAGE_FAMILY = "image"


def family_of(type_: str) -> Optional[str]:
    """
    Get the conversion family of a MIME type.

    Args:
        type_: MIME type, parameters allowed

    Returns:
        "text", "image", or None for types outside both families
    """
    mime_type = base_mime_type(type_)
    if mime_type in TEXT_TYPES:
        return TEXT_FAMILY
    if mime_type in IMAGE_TYPES:
        return IMAGE_FAMILY
    return None


def can_convert(from_type: str, to_type: str) -> bool:
    """
    Check whether two types are convertible at the family level.

    True when the types are equal or belong to the same family. Passing this
    check does not guarantee Pillow can encode the target image format.
    """
    source = base_mime_type(from_type)
    target = base_mime_type(to_type)
    if source == target:
        return True

    family = family_of(source)
    return family is not None and family == family_of(target)


def extension_to_mime_type(extension: str) -> str:
    """
    Map a file extension to a supported MIME type.

    Args:
        extension: Extension such as ".html" or "PNG" (case-insensitive, dot optional)

    Returns:
        MIME type, or "unknown" when the extension is not recognized
    """
    ext = extension.strip().lower()
    if ext and not ext.startswith('.'):
        ext = f".{ext}"
    return EXTENSION_TO_TYPE.get(ext, UNKNOWN_MIME_TYPE)
