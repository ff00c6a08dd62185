"""
Blob Store

Content-addressed file storage. Keys are derived from the content fingerprint
plus the original file extension, so a key always names the same bytes.
"""

import logging
from pathlib import Path

from content_shield.config import settings
from content_shield.exceptions import BlobNotFoundError
from content_shield.utils.security import safe_extension, validate_file_path

logger = logging.getLogger(__name__)

THUMBNAIL_PREFIX = "thumbnails"


def blob_key(fingerprint: str, filename: str | None = None) -> str:
    """Storage key for a fingerprint, keeping the original extension."""
    return f"{fingerprint}{safe_extension(filename)}"


def thumbnail_key(key: str) -> str:
    return f"{THUMBNAIL_PREFIX}/{key}"


class LocalBlobStore:
    """Blob store backed by a directory on the local filesystem"""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / THUMBNAIL_PREFIX).mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Resolve *key* to a path inside the store root."""
        return validate_file_path(self.root / key, self.root)

    def put(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Readers never observe a partial blob
        partial = path.with_name(f".{path.name}.partial")
        partial.write_bytes(data)
        partial.replace(path)
        logger.debug(f"Stored blob {key} ({len(data)} bytes)")

    def get(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as err:
            raise BlobNotFoundError(key) from err

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
        logger.debug(f"Deleted blob {key}")


_blob_store: LocalBlobStore | None = None


def get_blob_store() -> LocalBlobStore:
    """Dependency returning the process-wide blob store."""
    global _blob_store
    if _blob_store is None:
        _blob_store = LocalBlobStore(settings.upload_dir)
    return _blob_store
