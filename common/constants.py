"""Project-wide constants (MIME allow-list, families, extension table)."""

SUPPORTED_TYPES: tuple[str, ...] = (
    "text/plain",
    "text/html",
    "text/css",
    "text/javascript",
    "application/json",
    "text/markdown",
    "text/xml",
    "application/xml",
)

TEXT_TYPES: frozenset[str] = frozenset({
    "text/plain",
    "text/html",
    "text/css",
    "text/javascript",
    "text/markdown",
    "application/json",
})

IMAGE_TYPES: frozenset[str] = frozenset({
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/avif",
    "image/gif",
})

EXTENSION_TO_TYPE: dict[str, str] = {
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".md": "text/markdown",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".gif": "image/gif",
}

TYPE_TO_EXTENSION: dict[str, str] = {
    "text/plain": ".txt",
    "text/html": ".html",
    "text/css": ".css",
    "text/javascript": ".js",
    "application/json": ".json",
    "text/markdown": ".md",
    "text/xml": ".xml",
    "application/xml": ".xml",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/gif": ".gif",
}

DEFAULT_EXTENSION = ".txt"

UNKNOWN_MIME_TYPE = "unknown"

BLOB_SUFFIX = ".blob"
