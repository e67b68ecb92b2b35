"""Storage backends for fragment metadata and payloads."""

from datastore.base import StorageBackend
from datastore.blob_store import BlobStore, blob_key
from datastore.config import Settings
from datastore.durable_backend import DurableBackend
from datastore.factory import create_backend, create_blob_store
from datastore.file_blob_store import FileBlobStore
from datastore.http_blob_store import HttpBlobStore
from datastore.memory_backend import MemoryBackend
from datastore.memory_db import MemoryDB
from datastore.s3_blob_store import S3BlobStore

__all__ = [
    "StorageBackend",
    "BlobStore",
    "blob_key",
    "Settings",
    "DurableBackend",
    "create_backend",
    "create_blob_store",
    "FileBlobStore",
    "HttpBlobStore",
    "MemoryBackend",
    "MemoryDB",
    "S3BlobStore",
]
