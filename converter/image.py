"""Re-encoding between image-family MIME types with Pillow."""

import io

from PIL import Image, UnidentifiedImageError

from common.exceptions import ConversionUnsupportedError, InvalidDataError
from common.logging_config import get_logger
from common.utils import base_mime_type

logger = get_logger(__name__)

PIL_FORMATS = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/webp": "WEBP",
    "image/avif": "AVIF",
    "image/gif": "GIF",
}

# Formats whose encoders only take these modes; anything else is converted first.
_ENCODER_MODES = {
    "JPEG": ("RGB", "L", "CMYK"),
    "WEBP": ("RGB", "RGBA"),
    "AVIF": ("RGB", "RGBA"),
}


def _can_write(pil_format: str) -> bool:
    Image.init()
    return pil_format in Image.SAVE


def _prepare(image: Image.Image, pil_format: str) -> Image.Image:
    allowed = _ENCODER_MODES.get(pil_format)
    if allowed is None or image.mode in allowed:
        return image

    has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
    if has_alpha and "RGBA" in allowed:
        return image.convert("RGBA")
    return image.convert("RGB")


def convert_image(data: bytes, from_type: str, to_type: str) -> bytes:
    """
    Decode source image bytes and re-encode them in the target format.

    Identical types return the original bytes without touching the codec.

    Args:
        data: Encoded source image
        from_type: Source MIME type
        to_type: Target MIME type

    Returns:
        Encoded image in the target format

    Raises:
        ConversionUnsupportedError: If the target format cannot be written
        InvalidDataError: If the source bytes are not a decodable image
    """
    source = base_mime_type(from_type)
    target = base_mime_type(to_type)
    if source == target:
        return data

    pil_format = PIL_FORMATS.get(target)
    if pil_format is None:
        raise ConversionUnsupportedError(from_type, to_type, f"Unsupported image target type: {target}")
    if not _can_write(pil_format):
        raise ConversionUnsupportedError(
            from_type,
            to_type,
            f"Image encoder for {target} is not available",
        )

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            prepared = _prepare(image, pil_format)
            output = io.BytesIO()
            prepared.save(output, format=pil_format)
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Unable to decode image [from={source}, to={target}]: {e}")
        raise InvalidDataError(f"Unable to decode {source} image: {e}") from e

    converted = output.getvalue()
    logger.info(
        f"Image converted successfully [from={source}, to={target}, "
        f"original_size={len(data)}, converted_size={len(converted)}]"
    )
    return converted
