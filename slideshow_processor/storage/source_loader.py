from pathlib import Path

from slideshow_processor.storage.base import BaseBlobStorage
from slideshow_processor.storage.exceptions import (
    InvalidStorageUriError,
    SourceReadError,
    UnsupportedStorageSchemeError,
)

REMOTE_SCHEMES = ("gs", "s3")
LOCAL_SCHEMES = ("", "file")


def uri_scheme(path: str) -> str:
    """Lower-cased scheme before "://", or "" for a bare path."""
    scheme, separator, _rest = path.partition("://")
    return scheme.lower() if separator else ""


def split_object_uri(uri: str) -> tuple[str, str]:
    """Split gs://bucket/path/to/key into (bucket, key).

    The key is taken verbatim; object names may contain "#" or "?".
    """
    _scheme, separator, rest = uri.partition("://")
    bucket, _slash, key = rest.partition("/")
    if not separator or not bucket or not key:
        raise InvalidStorageUriError(f"Invalid object URI: {uri}")
    return bucket, key


class SourceLoader:
    """Reads a staged source from object storage or the local filesystem."""

    def __init__(self, storage: BaseBlobStorage) -> None:
        self._storage = storage

    def load(self, staging_path: str) -> bytes:
        """Return the raw source bytes.

        Raises:
            UnsupportedStorageSchemeError: for schemes other than gs, s3, file.
            FileNotFoundError: if a local source does not exist.
            SourceReadError: if the source is empty.
        """
        scheme = uri_scheme(staging_path)
        if scheme in REMOTE_SCHEMES:
            bucket, key = split_object_uri(staging_path)
            data = self._storage.download(bucket, key)
        elif scheme in LOCAL_SCHEMES:
            data = self._read_local(staging_path)
        else:
            raise UnsupportedStorageSchemeError(
                f"Staging path scheme '{scheme}' is not supported: {staging_path}"
            )
        if not data:
            raise SourceReadError(f"Source is empty: {staging_path}")
        return data

    @staticmethod
    def _read_local(staging_path: str) -> bytes:
        _scheme, separator, rest = staging_path.partition("://")
        path = Path(rest if separator else staging_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_bytes()
