from pathlib import Path

from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.exceptions import StorageError


class LocalBlobStorage(BaseBlobStorage):
    """Filesystem stand-in for object storage: {root}/{bucket}/{key}."""

    def __init__(self, root: Path, bucket: str) -> None:
        self._root = root
        self._bucket = bucket

    def download(self, bucket: str, key: str) -> bytes:
        path = self._root / bucket / key
        if not path.exists():
            raise StorageError(f"Object not found: {path}")
        return path.read_bytes()

    def upload(self, data: bytes, key: str, content_type: str) -> str:
        path = self._root / self._bucket / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        return str(path)
