import hashlib

from slideshow_processor.storage.exceptions import SourceReadError


def fingerprint(data: bytes) -> str:
    """SHA-256 of the raw source bytes as 64 lowercase hex characters.

    Identical content always maps to the same digest, so it serves both as the
    dedup key and as the stem of every storage key derived from the source.
    """
    if not data:
        raise SourceReadError("Cannot fingerprint empty content")
    return hashlib.sha256(data).hexdigest()
