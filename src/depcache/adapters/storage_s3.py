"""S3 storage adapter."""

from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import StorageError
from ..ports.storage import ObjectHead

if TYPE_CHECKING:
    from ..core.config import CacheConfig

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
MAX_ATTEMPTS = 3


class S3StorageAdapter:
    """S3 implementation of StoragePort."""

    def __init__(
        self,
        client: Any = None,
        endpoint_url: str | None = None,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        session_token: str | None = None,
        timeout: float = 300.0,
    ):
        """Initialize with an existing client or the settings to build one.

        Args:
            timeout: Overall budget in seconds for one operation. It is split
                across retry attempts so retries cannot outlast it.
        """
        self._client = client
        self._session_args = {
            "aws_access_key_id": access_key_id,
            "aws_secret_access_key": secret_access_key,
            "aws_session_token": session_token,
            "region_name": region,
        }
        self._endpoint_url = endpoint_url
        self.timeout = timeout

    @property
    def client(self) -> Any:
        """boto3 client, created on first use.

        Creation errors (for example a malformed endpoint URL) surface as
        StorageError from the operation that needed the client.
        """
        if self._client is None:
            per_attempt = self.timeout / MAX_ATTEMPTS
            try:
                session = boto3.session.Session(**self._session_args)
                self._client = session.client(
                    "s3",
                    endpoint_url=self._endpoint_url,
                    config=Config(
                        connect_timeout=min(per_attempt, 60),
                        read_timeout=per_attempt,
                        retries={"total_max_attempts": MAX_ATTEMPTS, "mode": "standard"},
                    ),
                )
            except (BotoCoreError, ValueError) as e:
                raise StorageError(f"Cannot create S3 client: {e}") from e
        return self._client

    @classmethod
    def from_config(cls, config: "CacheConfig") -> "S3StorageAdapter":
        return cls(
            endpoint_url=config.endpoint_url,
            region=config.region,
            access_key_id=config.access_key_id,
            secret_access_key=config.secret_access_key,
            session_token=config.session_token,
            timeout=config.timeout,
        )

    def head(self, key: str) -> ObjectHead | None:
        """Get object metadata."""
        bucket, object_key = self._split_key(key)
        try:
            response = self.client.head_object(Bucket=bucket, Key=object_key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return None
            raise StorageError(f"HEAD s3://{key} failed: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"HEAD s3://{key} failed: {e}") from e

        return ObjectHead(
            key=object_key,
            size=response["ContentLength"],
            etag=response.get("ETag", "").strip('"'),
            last_modified=response["LastModified"],
            metadata=response.get("Metadata", {}),
        )

    def list(self, prefix: str) -> Iterator[ObjectHead]:
        """List objects with prefix."""
        bucket, key_prefix = self._split_key(prefix)
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=bucket, Prefix=key_prefix):
                for obj in page.get("Contents", []):
                    yield ObjectHead(
                        key=obj["Key"],
                        size=obj["Size"],
                        etag=obj.get("ETag", "").strip('"'),
                        last_modified=obj["LastModified"],
                    )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"LIST s3://{prefix} failed: {e}") from e

    def get(self, key: str) -> BinaryIO:
        """Get object content as stream."""
        bucket, object_key = self._split_key(key)
        try:
            response = self.client.get_object(Bucket=bucket, Key=object_key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"GET s3://{key} failed: {e}") from e
        body: BinaryIO = response["Body"]
        return body

    def put(self, key: str, body: Path, metadata: dict[str, str]) -> None:
        """Upload a local file in a single PUT request."""
        bucket, object_key = self._split_key(key)
        content_type = "application/gzip" if body.name.endswith(".gz") else "application/x-tar"
        try:
            with open(body, "rb") as f:
                self.client.put_object(
                    Bucket=bucket,
                    Key=object_key,
                    Body=f,
                    Metadata=metadata,
                    ContentType=content_type,
                )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"PUT s3://{key} failed: {e}") from e

    def delete(self, key: str) -> None:
        """Delete object."""
        bucket, object_key = self._split_key(key)
        try:
            self.client.delete_object(Bucket=bucket, Key=object_key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"DELETE s3://{key} failed: {e}") from e

    def _split_key(self, key: str) -> tuple[str, str]:
        """Split ``bucket/key`` into its parts."""
        if key.startswith("s3://"):
            key = key[5:]
        parts = key.split("/", 1)
        if len(parts) == 1:
            return parts[0], ""
        return parts[0], parts[1]
