"""Client for a plain HTTP object store holding fragment payloads (unauthenticated PUT/GET/DELETE)."""

from typing import Optional
from urllib.parse import quote

import httpx

from common.exceptions import BackendFailureError
from common.logging_config import get_logger
from datastore.config import DEFAULT_BLOB_TIMEOUT_SECONDS

logger = get_logger(__name__)


class HttpBlobStore:
    """
    Blob store reached over HTTP: PUT/GET/DELETE {base_url}/{bucket}/{owner_id}/{fragment_id}.
    A 404 response means the object does not exist. Requests are not signed;
    use S3BlobStore for Amazon S3.
    """

    def __init__(
        self,
        base_url: str,
        bucket: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_BLOB_TIMEOUT_SECONDS,
    ):
        """
        Initialize blob store client.

        Args:
            base_url: Object store endpoint (e.g., http://blobs.internal:8080)
            bucket: Bucket holding fragment payloads
            client: Preconfigured AsyncClient (tests pass one with a mock transport)
            timeout: Request timeout in seconds when the client is created here
        """
        self.bucket = bucket
        self.session = client if client is not None else httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
        )
        logger.info(f"Initialized HttpBlobStore [base_url={base_url}, bucket={bucket}]")

    def _object_path(self, owner_id: str, fragment_id: str) -> str:
        return f"/{quote(self.bucket, safe='')}/{quote(owner_id, safe='')}/{quote(fragment_id, safe='')}"

    async def aclose(self) -> None:
        await self.session.aclose()

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        path = self._object_path(owner_id, fragment_id)
        try:
            response = await self.session.put(
                path,
                content=data,
                headers={"Content-Type": "application/octet-stream"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error uploading fragment data [bucket={self.bucket}, key={path}]: {e}")
            raise BackendFailureError("unable to upload fragment data") from e

        logger.info(f"Uploaded fragment data [bucket={self.bucket}, owner_id={owner_id}, id={fragment_id}, size={len(data)}]")

    async def read(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        path = self._object_path(owner_id, fragment_id)
        try:
            response = await self.session.get(path)
            if response.status_code == 404:
                logger.debug(f"Fragment data not found in object store [owner_id={owner_id}, id={fragment_id}]")
                return None
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error reading fragment data [bucket={self.bucket}, key={path}]: {e}")
            raise BackendFailureError("unable to read fragment data") from e

        return response.content

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        path = self._object_path(owner_id, fragment_id)
        try:
            response = await self.session.delete(path)
            if response.status_code == 404:
                return False
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error deleting fragment data [bucket={self.bucket}, key={path}]: {e}")
            raise BackendFailureError("unable to delete fragment data") from e

        logger.debug(f"Deleted fragment data [owner_id={owner_id}, id={fragment_id}]")
        return True
