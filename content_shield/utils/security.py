"""
Security Utilities

Path and filename helpers that keep stored blobs inside the storage root.
"""

import logging
import re
from pathlib import Path

from content_shield.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,15}$")


def validate_file_path(file_path: str | Path, base_dir: Path) -> Path:
    """
    Validate that a file path is within the allowed base directory.

    Prevents path traversal by ensuring the resolved path stays within the
    base directory.

    Args:
        file_path: Path to validate (can be string or Path object)
        base_dir: Base directory that file must be within

    Returns:
        Resolved Path object

    Raises:
        PermissionDeniedError: If path is outside base directory

    Example:
        >>> from pathlib import Path
        >>> base = Path("/srv/uploads")
        >>> validate_file_path("/srv/uploads/ab12.png", base)  # OK
        >>> validate_file_path("/srv/uploads/../etc/passwd", base)  # Raises
    """
    resolved_path = Path(file_path).resolve()
    base_resolved = base_dir.resolve()

    try:
        resolved_path.relative_to(base_resolved)
    except ValueError as err:
        logger.warning(
            f"Path traversal attempt detected: {file_path} (resolved: {resolved_path}) "
            f"is outside base directory {base_resolved}"
        )
        raise PermissionDeniedError("Access denied: Invalid file path", action="read_file") from err

    return resolved_path


def safe_extension(filename: str | None) -> str:
    """
    Return the lowercase extension of *filename* if it is safe to embed in a
    storage key, otherwise an empty string.

    Example:
        >>> safe_extension("Holiday Photo.JPG")
        '.jpg'
        >>> safe_extension("archive.tar/../x")
        ''
    """
    if not filename:
        return ""
    suffix = Path(filename.replace("\\", "/")).suffix.lower()
    return suffix if _EXTENSION_RE.match(suffix) else ""
