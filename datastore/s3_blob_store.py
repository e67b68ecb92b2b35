"""Amazon S3 (or S3-compatible) blob store built on boto3."""

import asyncio
from contextlib import closing
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from common.exceptions import BackendFailureError
from common.logging_config import get_logger
from datastore.blob_store import blob_key

logger = get_logger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


class S3BlobStore:
    """
    Payloads stored as objects "<owner_id>/<fragment_id>" in one bucket.

    boto3 clients are blocking, so every call runs via asyncio.to_thread.
    Credentials come from boto3's default chain (environment, profile, role).
    """

    def __init__(
        self,
        bucket: str,
        client=None,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize S3 blob store.

        Args:
            bucket: Bucket holding fragment payloads
            client: Preconfigured S3 client (tests pass a stubbed one)
            region_name: AWS region when the client is created here
            endpoint_url: Custom endpoint for S3-compatible stores (e.g., MinIO)
        """
        self.bucket = bucket
        self.client = client if client is not None else boto3.client(
            "s3",
            region_name=region_name,
            endpoint_url=endpoint_url,
        )
        logger.info(f"Initialized S3BlobStore [bucket={bucket}, endpoint={endpoint_url or 'aws'}]")

    def _put(self, key: str, data: bytes) -> None:
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data)

    def _get(self, key: str) -> Optional[bytes]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return None
            raise
        with closing(response["Body"]) as body:
            return body.read()

    def _delete(self, key: str) -> bool:
        # DeleteObject succeeds for absent keys, so existence is checked first.
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return False
            raise
        self.client.delete_object(Bucket=self.bucket, Key=key)
        return True

    async def _call(self, action: str, operation, key: str, *args):
        try:
            return await asyncio.to_thread(operation, key, *args)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error during S3 {action} [bucket={self.bucket}, key={key}]: {e}")
            raise BackendFailureError(f"unable to {action} fragment data") from e

    async def write(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        key = blob_key(owner_id, fragment_id)
        await self._call("upload", self._put, key, bytes(data))
        logger.info(f"Uploaded fragment data [bucket={self.bucket}, owner_id={owner_id}, id={fragment_id}, size={len(data)}]")

    async def read(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        data = await self._call("read", self._get, blob_key(owner_id, fragment_id))
        if data is None:
            logger.debug(f"Fragment data not found in S3 [owner_id={owner_id}, id={fragment_id}]")
        return data

    async def delete(self, owner_id: str, fragment_id: str) -> bool:
        deleted = await self._call("delete", self._delete, blob_key(owner_id, fragment_id))
        if deleted:
            logger.debug(f"Deleted fragment data [owner_id={owner_id}, id={fragment_id}]")
        return deleted

    async def aclose(self) -> None:
        await asyncio.to_thread(self.client.close)
