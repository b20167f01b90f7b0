from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.exceptions import StorageError

CACHE_CONTROL = "public, max-age=31536000"


class S3BlobStorage(BaseBlobStorage):
    """Blob storage over any S3-compatible endpoint (GCS via its interop API)."""

    def __init__(
        self,
        *,
        bucket: str,
        uri_scheme: str = "gs",
        client: Any | None = None,
        endpoint_url: str | None = None,
        access_key: str = "",
        secret_key: str = "",
        region: str | None = None,
    ) -> None:
        self._bucket = bucket
        self._uri_scheme = uri_scheme
        self._client = client if client is not None else boto3.client(
            "s3",
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            region_name=region or None,
        )

    def download(self, bucket: str, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to download {bucket}/{key}: {exc}") from exc

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=CACHE_CONTROL,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {self._bucket}/{key}: {exc}") from exc
        return f"{self._uri_scheme}://{self._bucket}/{key}"
