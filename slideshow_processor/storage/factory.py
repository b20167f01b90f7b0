from pathlib import Path

from slideshow_processor.config.settings import Settings
from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.local_adapter import LocalBlobStorage
from slideshow_processor.storage.s3_adapter import S3BlobStorage


class StorageFactory:
    """Creates the blob storage adapter selected in settings."""

    BACKENDS = ("s3", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStorage:
        backend = settings.storage_backend.lower()
        if backend == "s3":
            return S3BlobStorage(
                bucket=settings.bucket_name,
                uri_scheme=settings.storage_uri_scheme,
                endpoint_url=settings.storage_endpoint_url,
                access_key=settings.storage_access_key,
                secret_key=settings.storage_secret_key,
                region=settings.storage_region,
            )
        if backend == "local":
            return LocalBlobStorage(Path(settings.storage_local_root), settings.bucket_name)
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
