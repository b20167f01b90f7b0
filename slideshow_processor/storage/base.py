from abc import ABC, abstractmethod


class BaseBlobStorage(ABC):
    """Contract for content-addressed blob storage adapters.

    Uploads always target the configured bucket; downloads may name any
    bucket since staged sources can live outside it.
    """

    @abstractmethod
    def download(self, bucket: str, key: str) -> bytes:
        """Read an object.

        Raises:
            StorageError: if the object cannot be read.
        """

    @abstractmethod
    def upload(self, data: bytes, key: str, content_type: str) -> str:
        """Write an object into the configured bucket and return its URI."""
