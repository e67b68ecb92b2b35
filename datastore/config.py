"""Configuration settings for the fragment storage backends."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


BACKEND_MEMORY = "memory"
BACKEND_DURABLE = "durable"

BLOB_STORE_FILE = "file"
BLOB_STORE_HTTP = "http"
BLOB_STORE_S3 = "s3"
BLOB_STORES = (BLOB_STORE_FILE, BLOB_STORE_HTTP, BLOB_STORE_S3)

DEFAULT_DATABASE_PATH = "./data/fragments.db"
DEFAULT_BLOB_PATH = "./data/blobs"
DEFAULT_BLOB_BUCKET = "fragments"
DEFAULT_BLOB_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Settings:
    """
    Storage settings, read once at process start.

    blob_store None means: "http" when blob_url is set, "file" otherwise.
    For "s3", blob_url is an optional custom endpoint (S3-compatible stores).
    """
    backend: str = BACKEND_MEMORY
    database_path: str = DEFAULT_DATABASE_PATH
    blob_store: Optional[str] = None
    blob_path: str = DEFAULT_BLOB_PATH
    blob_url: Optional[str] = None
    blob_bucket: str = DEFAULT_BLOB_BUCKET
    blob_timeout: float = DEFAULT_BLOB_TIMEOUT_SECONDS
    s3_region: Optional[str] = None
    log_level: str = "INFO"

    @property
    def resolved_blob_store(self) -> str:
        if self.blob_store:
            return self.blob_store
        return BLOB_STORE_HTTP if self.blob_url else BLOB_STORE_FILE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings instance

        Raises:
            ValueError: If FRAGMENTS_BACKEND or FRAGMENTS_BLOB_STORE names an unknown value
        """
        env = os.environ if environ is None else environ

        backend = env.get("FRAGMENTS_BACKEND", BACKEND_MEMORY).strip().lower()
        if backend not in (BACKEND_MEMORY, BACKEND_DURABLE):
            raise ValueError(f"Unknown storage backend: {backend}")

        blob_store = env.get("FRAGMENTS_BLOB_STORE", "").strip().lower() or None
        if blob_store is not None and blob_store not in BLOB_STORES:
            raise ValueError(f"Unknown blob store: {blob_store}")

        return cls(
            backend=backend,
            database_path=env.get("FRAGMENTS_DATABASE_PATH", DEFAULT_DATABASE_PATH),
            blob_store=blob_store,
            blob_path=env.get("FRAGMENTS_BLOB_PATH", DEFAULT_BLOB_PATH),
            blob_url=env.get("FRAGMENTS_BLOB_URL") or None,
            blob_bucket=env.get("FRAGMENTS_BLOB_BUCKET", DEFAULT_BLOB_BUCKET),
            blob_timeout=float(env.get("FRAGMENTS_BLOB_TIMEOUT", DEFAULT_BLOB_TIMEOUT_SECONDS)),
            s3_region=env.get("FRAGMENTS_S3_REGION") or env.get("AWS_REGION") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
