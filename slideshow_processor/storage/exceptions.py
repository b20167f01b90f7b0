class StorageError(Exception):
    """Base exception for all blob storage errors."""


class UnsupportedStorageSchemeError(StorageError):
    """Raised when a staging path uses a scheme no adapter can read."""


class InvalidStorageUriError(StorageError):
    """Raised when a remote object URI is missing its bucket or key."""


class SourceReadError(StorageError):
    """Raised when source content is empty or cannot be read."""
