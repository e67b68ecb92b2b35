"""Backend selection: build the configured storage strategy once at startup."""

from common.logging_config import get_logger
from datastore.base import StorageBackend
from datastore.blob_store import BlobStore
from datastore.config import BACKEND_DURABLE, BLOB_STORE_HTTP, BLOB_STORE_S3, Settings
from datastore.durable_backend import DurableBackend
from datastore.file_blob_store import FileBlobStore
from datastore.http_blob_store import HttpBlobStore
from datastore.memory_backend import MemoryBackend
from datastore.s3_blob_store import S3BlobStore

logger = get_logger(__name__)


def create_blob_store(settings: Settings) -> BlobStore:
    """
    Build the blob store named by settings.resolved_blob_store.
    """
    kind = settings.resolved_blob_store
    if kind == BLOB_STORE_S3:
        return S3BlobStore(
            bucket=settings.blob_bucket,
            region_name=settings.s3_region,
            endpoint_url=settings.blob_url,
        )
    if kind == BLOB_STORE_HTTP:
        if not settings.blob_url:
            raise ValueError("FRAGMENTS_BLOB_URL is required for the http blob store")
        return HttpBlobStore(
            base_url=settings.blob_url,
            bucket=settings.blob_bucket,
            timeout=settings.blob_timeout,
        )
    return FileBlobStore(settings.blob_path)


def create_backend(settings: Settings) -> StorageBackend:
    """
    Build the storage backend named by settings.

    Args:
        settings: Storage settings

    Returns:
        MemoryBackend, or DurableBackend over a filesystem, HTTP or S3 blob store.
        Callers release it with aclose() at shutdown.
    """
    if settings.backend != BACKEND_DURABLE:
        logger.info("Data backend selected [backend=memory]")
        return MemoryBackend()

    blob_store = create_blob_store(settings)
    logger.info(
        f"Data backend selected [backend=durable, database={settings.database_path}, "
        f"blobs={settings.resolved_blob_store}]"
    )
    return DurableBackend.open(settings.database_path, blob_store)
